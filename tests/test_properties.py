"""Tests for member -> property extraction."""

from __future__ import annotations

from widgetmap.model import MemberDescription
from widgetmap.properties import (
    UnknownFinalityPolicy,
    extract_properties,
    extract_property,
)

from conftest import make_class


def test_final_field_is_immutable():
    prop = extract_property(MemberDescription(name="key", type_name="Key", is_final=True))
    assert prop.mutable is False
    assert prop.declared_type == "Key"


def test_non_final_field_is_mutable():
    prop = extract_property(MemberDescription(name="value", type_name="int", is_final=False))
    assert prop.mutable is True


def test_unknown_finality_defaults_to_immutable():
    member = MemberDescription(name="child", type_name="Widget", is_final=None)
    assert extract_property(member).mutable is False


def test_unknown_finality_policy_can_assume_mutable():
    member = MemberDescription(name="child", type_name="Widget", is_final=None)
    prop = extract_property(member, unknown_finality=UnknownFinalityPolicy.ASSUME_MUTABLE)
    assert prop.mutable is True


def test_required_marker_sets_required():
    member = MemberDescription(
        name="child", type_name="Widget", is_named=True, has_required_marker=True
    )
    prop = extract_property(member)
    assert prop.is_named is True
    assert prop.is_required is True


def test_named_and_required_only_apply_to_parameters():
    member = MemberDescription(
        name="size",
        type_name="double",
        is_final=False,
        is_named=True,
        is_required=True,
        from_parameter=False,
    )
    prop = extract_property(member)
    assert prop.is_named is False
    assert prop.is_required is False
    assert prop.mutable is True


def test_documentation_is_normalized():
    member = MemberDescription(
        name="key", type_name="Key", documentation="/// Controls replacement.\n///  "
    )
    assert extract_property(member).documentation == "Controls replacement."


def test_extract_properties_keeps_declaration_order():
    cls = make_class(
        "Text",
        "Widget",
        members=[
            MemberDescription(name="data", type_name="String"),
            MemberDescription(name="style", type_name="TextStyle"),
            MemberDescription(name="key", type_name="Key"),
        ],
    )
    assert [p.name for p in extract_properties(cls)] == ["data", "style", "key"]
