"""Turn member descriptions into normalized properties."""

from __future__ import annotations

import enum

from widgetmap.docs import normalize_documentation
from widgetmap.model import ClassDescription, MemberDescription, Property


class UnknownFinalityPolicy(str, enum.Enum):
    """What to assume about a member whose finality cannot be determined."""

    ASSUME_IMMUTABLE = "assume-immutable"
    ASSUME_MUTABLE = "assume-mutable"


def extract_property(
    member: MemberDescription,
    *,
    unknown_finality: UnknownFinalityPolicy = UnknownFinalityPolicy.ASSUME_IMMUTABLE,
) -> Property:
    if member.is_final is None:
        mutable = unknown_finality is UnknownFinalityPolicy.ASSUME_MUTABLE
    else:
        mutable = not member.is_final

    # Named/required only mean something for constructor parameters.
    is_named = member.from_parameter and member.is_named
    is_required = member.from_parameter and (
        member.is_required or member.has_required_marker
    )

    return Property(
        name=member.name,
        declared_type=member.type_name,
        mutable=mutable,
        is_named=is_named,
        is_required=is_required,
        documentation=normalize_documentation(member.documentation),
    )


def extract_properties(
    cls: ClassDescription,
    *,
    unknown_finality: UnknownFinalityPolicy = UnknownFinalityPolicy.ASSUME_IMMUTABLE,
) -> list[Property]:
    """Return the properties of *cls* in declaration order."""
    return [
        extract_property(m, unknown_finality=unknown_finality) for m in cls.members
    ]
