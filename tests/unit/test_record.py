"""
Unit tests for record and enum derivation.

Tests cover:
- Wire names under casing policies and explicit renames
- Missing properties and suggestions
- Optional and defaulted fields
- Nested records
- Enum variants as strings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pytest

from sdk.datastore_sdk.errors import (
    DecodeError,
    MissingPropertyError,
    UnexpectedPropertyTypeError,
)
from sdk.datastore_sdk.record import enum_value, record, record_fields, renamed
from sdk.datastore_sdk.value import (
    EntityValue,
    IntegerValue,
    OptionValue,
    StringValue,
    from_value,
    into_value,
)


@record
@dataclass
class Profile:
    display_name: str
    login_count: int
    nickname: Optional[str] = None


@record(rename_all="snake_case")
@dataclass
class Customer:
    firstName: str
    email: str = renamed("mail")
    tags: list[str] = field(default_factory=list)


@enum_value(rename_all="SCREAMING-KEBAB-CASE", renames={"LEGACY": "old"})
class Status(Enum):
    IN_PROGRESS = 1
    ARE_WE_THERE_YET = 2
    LEGACY = 3


@enum_value
class Plan(Enum):
    FREE_TIER = "free"
    PRO = "pro"


@record
@dataclass
class Account:
    owner: Profile
    plan: Plan
    history: list[Status] = field(default_factory=list)


class TestRecordInto:
    """Tests for record -> Value."""

    def test_camel_case_default(self):
        """Fields are renamed to camelCase by default."""
        value = into_value(Profile("Ada", 3))

        assert value == EntityValue(
            {
                "displayName": StringValue("Ada"),
                "loginCount": IntegerValue(3),
                "nickname": OptionValue(None),
            }
        )

    def test_casing_and_explicit_rename(self):
        """rename_all applies except where a field is renamed explicitly."""
        value = into_value(Customer("Ada", "ada@example.com"))

        assert set(value.properties) == {"first_name", "mail", "tags"}
        assert value.properties["mail"] == StringValue("ada@example.com")

    def test_record_fields_metadata(self):
        """record_fields lists wire names and requiredness in order."""
        fields = record_fields(Customer)

        assert [f.wire_name for f in fields] == ["first_name", "mail", "tags"]
        assert [f.required for f in fields] == [True, True, False]

    def test_requires_dataclass(self):
        """@record only applies to dataclasses."""
        with pytest.raises(TypeError):

            @record
            class NotADataclass:
                pass


class TestRecordFrom:
    """Tests for Value -> record."""

    def test_round_trip(self):
        """A record survives conversion both ways."""
        profile = Profile("Ada", 3, nickname="countess")
        assert from_value(into_value(profile), Profile) == profile

    def test_missing_required_property(self):
        """An absent required property raises MissingPropertyError."""
        value = EntityValue({"displayName": StringValue("Ada")})

        with pytest.raises(MissingPropertyError) as exc:
            from_value(value, Profile)

        assert exc.value.property_name == "loginCount"

    def test_missing_property_suggests_casing_mismatch(self):
        """Similarly named properties are suggested."""
        value = EntityValue(
            {"display_name": StringValue("Ada"), "login_count": IntegerValue(1)}
        )

        with pytest.raises(MissingPropertyError) as exc:
            from_value(value, Profile)

        assert exc.value.property_name == "displayName"
        assert "display_name" in exc.value.suggestions
        assert "Did you mean" in str(exc.value)

    def test_optional_field_may_be_absent(self):
        """Fields with defaults are optional on reconstruction."""
        value = EntityValue({"displayName": StringValue("Ada"), "loginCount": IntegerValue(1)})
        assert from_value(value, Profile) == Profile("Ada", 1)

    def test_extra_properties_ignored(self):
        """Properties with no matching field are ignored."""
        value = EntityValue(
            {
                "displayName": StringValue("Ada"),
                "loginCount": IntegerValue(1),
                "legacyField": StringValue("x"),
            }
        )
        assert from_value(value, Profile) == Profile("Ada", 1)

    def test_wrong_field_type(self):
        """A field holding the wrong variant raises UnexpectedPropertyTypeError."""
        value = EntityValue({"displayName": StringValue("Ada"), "loginCount": StringValue("1")})

        with pytest.raises(UnexpectedPropertyTypeError) as exc:
            from_value(value, Profile)

        assert (exc.value.expected, exc.value.got) == ("integer", "string")

    def test_non_record_value(self):
        """Records only reconstruct from EntityValue."""
        with pytest.raises(UnexpectedPropertyTypeError) as exc:
            from_value(StringValue("Ada"), Profile)

        assert exc.value.expected == "entity"

    def test_nested_records_and_enums(self):
        """Records nest records, enums and lists of enums."""
        account = Account(
            owner=Profile("Ada", 1),
            plan=Plan.FREE_TIER,
            history=[Status.IN_PROGRESS, Status.LEGACY],
        )

        value = into_value(account)

        assert value.properties["plan"] == StringValue("freeTier")
        assert from_value(value, Account) == account


class TestEnumValue:
    """Tests for @enum_value."""

    @pytest.mark.parametrize(
        "member,wire",
        [
            (Status.IN_PROGRESS, "IN-PROGRESS"),
            (Status.ARE_WE_THERE_YET, "ARE-WE-THERE-YET"),
            (Status.LEGACY, "old"),
        ],
    )
    def test_wire_names(self, member, wire):
        """Variants are stored as renamed strings."""
        assert into_value(member) == StringValue(wire)
        assert from_value(StringValue(wire), Status) is member

    def test_unknown_variant(self):
        """An unknown variant name is a decode error."""
        with pytest.raises(DecodeError):
            from_value(StringValue("LEGACY"), Status)

    def test_non_string_variant(self):
        """Enum variants only reconstruct from StringValue."""
        with pytest.raises(UnexpectedPropertyTypeError) as exc:
            from_value(IntegerValue(1), Status)

        assert exc.value.expected == "string"

    def test_unknown_rename_rejected(self):
        """renames may only name existing members."""
        with pytest.raises(ValueError):

            @enum_value(renames={"MISSING": "x"})
            class Color(Enum):
                RED = 1
