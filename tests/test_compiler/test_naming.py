"""Tests for specir.compiler.naming."""

from __future__ import annotations

import pytest

from specir.compiler.naming import (
    camelcase,
    clean_operation_id,
    find_unique_schema_name,
    format_name,
    is_valid_identifier,
    join_skip_digits,
    pascalcase,
    schema_identifier,
    snakecase,
    split_words,
)


# ---------------------------------------------------------------------------
# Casing
# ---------------------------------------------------------------------------


class TestCasing:
    """Test word splitting and case conversion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("date-time", "dateTime"),
            ("user_profiles", "userProfiles"),
            ("UserProfiles", "userProfiles"),
            ("iso-8601", "iso8601"),
            ("  ", ""),
        ],
    )
    def test_camelcase(self, value: str, expected: str) -> None:
        assert camelcase(value) == expected

    def test_pascalcase(self) -> None:
        assert pascalcase("pet entry") == "PetEntry"
        assert pascalcase("listPets") == "ListPets"

    def test_snakecase(self) -> None:
        assert snakecase("userProfiles") == "user_profiles"
        assert snakecase("pets") == "pets"

    def test_split_words_on_acronyms(self) -> None:
        assert split_words("getUser2FAStatus") == ["get", "User2", "FA", "Status"]
        assert split_words("HTTPServer") == ["HTTP", "Server"]

    def test_join_skip_digits(self) -> None:
        assert join_skip_digits(["Pet", "2", "owner"], " ") == "Pet2 owner"


class TestCleanOperationId:
    """Test operationId cleanup."""

    def test_keeps_part_after_hash(self) -> None:
        assert clean_operation_id("pets#list-v2") == "listV2"

    def test_drops_dash_before_digit(self) -> None:
        assert clean_operation_id("get-v-2") == "getV2"

    def test_plain_id(self) -> None:
        assert clean_operation_id("listPets") == "listPets"

    def test_leading_digit_is_prefixed(self) -> None:
        assert clean_operation_id("2fa-verify") == "_2faVerify"
        assert clean_operation_id("_2faVerify") == "_2faVerify"


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class TestIdentifiers:
    """Test identifier validation and enum-name formatting."""

    def test_valid_identifier(self) -> None:
        assert is_valid_identifier("Pet")
        assert is_valid_identifier("_private")
        assert not is_valid_identifier("pet-category")
        assert not is_valid_identifier("2fa")
        assert not is_valid_identifier("Error", {"Error"})

    def test_format_name_collapses_separators(self) -> None:
        assert format_name("foo-bar") == format_name("foo_bar") == "foo_bar"

    def test_format_name_numbers(self) -> None:
        assert format_name(3) == "$3"
        assert format_name(-3) == "$_3"
        assert format_name("1st") == "$1st"

    def test_format_name_reserved(self) -> None:
        assert format_name("class", {"class"}) == "$class"

    def test_format_name_special_characters(self) -> None:
        assert format_name("-created_at") == "desc_created_at"
        assert format_name("a+b") == "a_plus_b"


class TestFindUniqueSchemaName:
    """Test component name allocation."""

    def test_free_name_is_used(self) -> None:
        spec: dict = {}
        assert find_unique_schema_name(spec, "listPets", ("output",)) == "ListPets"
        assert spec["components"]["schemas"] == {}

    def test_suffixes_then_counter(self) -> None:
        spec = {"components": {"schemas": {"ListPets": {}, "ListPetsOutput": {}}}}
        assert (
            find_unique_schema_name(spec, "listPets", ("output", "payload"))
            == "ListPetsOutputPayload"
        )
        spec["components"]["schemas"]["ListPetsOutputPayload"] = {}
        assert (
            find_unique_schema_name(spec, "listPets", ("output", "payload"))
            == "ListPetsOutputPayload2"
        )

    def test_reserved_names_are_skipped(self) -> None:
        assert find_unique_schema_name({}, "error", ("schema",), {"Error"}) == "ErrorSchema"

    def test_leading_digit_is_prefixed(self) -> None:
        spec: dict = {}
        assert find_unique_schema_name(spec, "2fa-verify", ("input",)) == "_2faVerify"
        spec["components"]["schemas"]["_2faVerify"] = {}
        name = find_unique_schema_name(spec, "2fa-verify", ("input",))
        assert name == "_2faVerifyInput"
        assert is_valid_identifier(name)

    def test_status_suffixed_name(self) -> None:
        assert find_unique_schema_name({}, "2faVerify404", ()) == "_2faVerify404"

    def test_empty_name_falls_back(self) -> None:
        assert find_unique_schema_name({}, "---", ()) == "Schema"

    def test_schema_identifier(self) -> None:
        assert schema_identifier("2fa verify") == "_2faVerify"
        assert schema_identifier("pet owner") == "PetOwner"
