"""
Unit tests for identifier casing transforms.

Tests cover:
- Word splitting
- Every casing policy
- Parsing casing names
"""

import pytest

from sdk.datastore_sdk.casing import Casing, split_words, transform


class TestSplitWords:
    """Tests for split_words."""

    @pytest.mark.parametrize(
        "identifier,words",
        [
            ("first_name", ["first", "name"]),
            ("AreWeThereYet", ["Are", "We", "There", "Yet"]),
            ("IN_PROGRESS", ["IN", "PROGRESS"]),
            ("kebab-case-name", ["kebab", "case", "name"]),
            ("address2Line", ["address2", "Line"]),
            ("__private", ["private"]),
            ("", []),
        ],
    )
    def test_split(self, identifier, words):
        """Identifiers split on separators and lower-to-upper boundaries."""
        assert split_words(identifier) == words


class TestTransform:
    """Tests for transform."""

    @pytest.mark.parametrize(
        "casing,expected",
        [
            (Casing.LOWER, "arewethereyet"),
            (Casing.UPPER, "AREWETHEREYET"),
            (Casing.CAMEL, "areWeThereYet"),
            (Casing.PASCAL, "AreWeThereYet"),
            (Casing.SNAKE, "are_we_there_yet"),
            (Casing.SCREAMING_SNAKE, "ARE_WE_THERE_YET"),
            (Casing.KEBAB, "are-we-there-yet"),
            (Casing.SCREAMING_KEBAB, "ARE-WE-THERE-YET"),
        ],
    )
    def test_pascal_source(self, casing, expected):
        """A PascalCase variant name under each policy."""
        assert transform("AreWeThereYet", casing) == expected

    @pytest.mark.parametrize(
        "casing,expected",
        [
            (Casing.CAMEL, "displayName"),
            (Casing.PASCAL, "DisplayName"),
            (Casing.SNAKE, "display_name"),
            (Casing.KEBAB, "display-name"),
            (Casing.LOWER, "display_name"),
        ],
    )
    def test_snake_source(self, casing, expected):
        """A snake_case field name under each policy."""
        assert transform("display_name", casing) == expected

    @pytest.mark.parametrize(
        "identifier,casing,expected",
        [
            ("HTTPServer", Casing.PASCAL, "HTTPServer"),
            ("parse_HTTPHeader", Casing.PASCAL, "ParseHTTPHeader"),
            ("parse_HTTPHeader", Casing.CAMEL, "parseHTTPHeader"),
            ("FREE_TIER", Casing.CAMEL, "freeTier"),
            ("FREE_TIER", Casing.PASCAL, "FreeTier"),
        ],
    )
    def test_mixed_case_words_kept(self, identifier, casing, expected):
        """Capitalizing a word leaves the rest of a mixed-case word alone."""
        assert transform(identifier, casing) == expected

    def test_casing_by_spelling(self):
        """Policies can be given by their conventional spelling."""
        assert transform("display_name", "camelCase") == "displayName"
        assert transform("InProgress", "SCREAMING-KEBAB-CASE") == "IN-PROGRESS"


class TestCasingFromStr:
    """Tests for Casing.from_str."""

    @pytest.mark.parametrize(
        "spelling,casing",
        [
            ("lowercase", Casing.LOWER),
            ("UPPERCASE", Casing.UPPER),
            ("camelCase", Casing.CAMEL),
            ("PascalCase", Casing.PASCAL),
            ("snake_case", Casing.SNAKE),
            ("SCREAMING_SNAKE_CASE", Casing.SCREAMING_SNAKE),
            ("kebab-case", Casing.KEBAB),
            ("SCREAMING-KEBAB-CASE", Casing.SCREAMING_KEBAB),
            ("camel", Casing.CAMEL),
        ],
    )
    def test_known(self, spelling, casing):
        assert Casing.from_str(spelling) is casing

    def test_unknown(self):
        with pytest.raises(ValueError, match="Invalid casing"):
            Casing.from_str("Title Case")
