"""Fatal error types; each carries the process exit status it maps to."""

from __future__ import annotations


class WidgetMapError(Exception):
    """Base class for errors that abort a run."""

    exit_code = 2


class ConfigurationError(WidgetMapError):
    """The environment or settings needed to start the run are missing or invalid."""

    exit_code = 2


class RootNotFoundError(WidgetMapError):
    """The designated root type is not among the analyzed classes."""

    exit_code = 3

    def __init__(self, root_name: str) -> None:
        super().__init__(f"Root type {root_name!r} was not found in the analyzed sources.")
        self.root_name = root_name


class UnresolvedSupertypeError(WidgetMapError):
    """A supertype name did not resolve and the policy forbids omitting it."""

    exit_code = 4

    def __init__(self, type_name: str, supertype_name: str) -> None:
        super().__init__(
            f"Supertype {supertype_name!r} of {type_name!r} is not a registered type."
        )
        self.type_name = type_name
        self.supertype_name = supertype_name
