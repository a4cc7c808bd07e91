"""End-to-end tests for specir.compiler.ir against the petstore fixture."""

from __future__ import annotations

import copy
import re
from typing import Any

import pytest

from specir.compiler.ir import AUGMENTED_MARKER, build_ir, canonicalize_schema_names, collect_tags
from specir.compiler.operations import for_each_operation
from specir.compiler.schema import is_composite
from specir.exceptions import SchemaConflictError
from specir.models import GenerateConfig, PaginationConfig, ResponsesConfig
from specir.parser.resolver import is_ref

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _operations(ir: dict[str, Any]) -> dict[str, dict[str, Any]]:
    return {op["operationId"]: op for op in for_each_operation(ir, lambda entry, op: op)}


def _refs(node: Any) -> list[str]:
    if isinstance(node, dict):
        found = [node["$ref"]] if isinstance(node.get("$ref"), str) else []
        for value in node.values():
            found.extend(_refs(value))
        return found
    if isinstance(node, list):
        return [ref for value in node for ref in _refs(value)]
    return []


# ---------------------------------------------------------------------------
# Build contract
# ---------------------------------------------------------------------------


class TestBuildContract:
    """Test idempotence and input isolation."""

    def test_marker_is_set(self, petstore_ir: dict[str, Any]) -> None:
        assert petstore_ir[AUGMENTED_MARKER] is True

    def test_augmented_input_returned_unchanged(self, petstore_ir: dict[str, Any]) -> None:
        assert build_ir(petstore_ir) is petstore_ir

    def test_builds_are_deterministic(self, petstore_raw: dict[str, Any]) -> None:
        assert build_ir(petstore_raw) == build_ir(petstore_raw)

    def test_input_is_not_modified(self, petstore_raw: dict[str, Any]) -> None:
        before = copy.deepcopy(petstore_raw)
        build_ir(petstore_raw)
        assert petstore_raw == before

    def test_minimal_document(self) -> None:
        ir = build_ir({"openapi": "3.1.0"})
        assert ir["paths"] == {}
        assert ir["components"]["schemas"] == {}
        assert ir["x-tagGroups"] == [{"name": "API", "tags": []}]

    def test_conflict_propagates(self) -> None:
        spec = {"components": {"schemas": {"Bad": {"allOf": [{"type": "object"}, {"type": "string"}]}}}}
        with pytest.raises(SchemaConflictError):
            build_ir(spec)


class TestCanonicalNames:
    """Test component renaming and reference rewriting."""

    def test_renames(self) -> None:
        spec = {
            "components": {
                "schemas": {
                    "pet-category": {"type": "string"},
                    "Error": {"type": "object"},
                    "2fa": {"type": "string"},
                    "Pet": {"properties": {"category": {"$ref": "#/components/schemas/pet-category"}}},
                }
            }
        }
        renames = canonicalize_schema_names(spec, {"Error"})
        assert renames == {"pet-category": "PetCategory", "Error": "ErrorSchema", "2fa": "_2fa"}
        assert list(spec["components"]["schemas"]) == ["PetCategory", "ErrorSchema", "_2fa", "Pet"]
        assert spec["components"]["schemas"]["Pet"]["properties"]["category"] == {
            "$ref": "#/components/schemas/PetCategory"
        }

    def test_collision_with_existing_name(self) -> None:
        spec = {"components": {"schemas": {"PetCategory": {}, "pet-category": {}}}}
        assert canonicalize_schema_names(spec) == {"pet-category": "PetCategory2"}

    def test_valid_names_untouched(self) -> None:
        spec = {"components": {"schemas": {"Pet": {}}}}
        assert canonicalize_schema_names(spec) == {}

    def test_petstore_refs_rewritten(self, petstore_ir: dict[str, Any]) -> None:
        schemas = petstore_ir["components"]["schemas"]
        assert "ErrorSchema" in schemas and "Error" not in schemas
        assert "PetCategory" in schemas and "pet-category" not in schemas
        prefix = "#/components/schemas/"
        for ref in _refs(petstore_ir):
            if ref.startswith(prefix):
                assert ref[len(prefix):] in schemas


def _digit_led_document() -> dict[str, Any]:
    obj = {"type": "object", "properties": {"code": {"type": "string"}}}
    return {
        "openapi": "3.1.0",
        "paths": {
            "/2fa/verify": {
                "post": {
                    "operationId": "2fa-verify",
                    "parameters": [
                        {
                            "name": "filter",
                            "in": "query",
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "range": {
                                        "type": "object",
                                        "properties": {"from": {"type": "integer"}},
                                    }
                                },
                            },
                        }
                    ],
                    "requestBody": {"content": {"application/json": {"schema": obj}}},
                    "responses": {
                        "200": {"description": "OK", "content": {"application/json": {"schema": obj}}},
                        "404": {"description": "Nope", "content": {"application/json": {"schema": obj}}},
                    },
                }
            }
        },
    }


def _inline_composites(schema: Any) -> list[Any]:
    """Composite schemas nested inline below a component's top level."""
    if not isinstance(schema, dict):
        return []
    children: list[Any] = [*(schema.get("properties") or {}).values()]
    children += [
        {key: value for key, value in prop.items() if key != "x-in"}
        for prop in (schema.get("x-properties") or {}).values()
        if isinstance(prop, dict)
    ]
    children += [schema.get("items"), schema.get("additionalProperties")]
    children += [*(schema.get("oneOf") or []), *(schema.get("anyOf") or [])]

    found: list[Any] = []
    for child in children:
        if is_composite(child):
            found.append(child)
        elif isinstance(child, dict) and not is_ref(child):
            found.extend(_inline_composites(child))
    return found


class TestGeneratedIdentifiers:
    """Test names derived from operation IDs that start with a digit."""

    @pytest.fixture
    def ir(self) -> dict[str, Any]:
        config = GenerateConfig(responses=ResponsesConfig(flatten_error_responses=True))
        return build_ir(_digit_led_document(), config)

    def test_component_names_are_identifiers(self, ir: dict[str, Any]) -> None:
        names = list(ir["components"]["schemas"])
        assert {"_2faVerify", "_2faVerifyInput", "_2faVerify404"} <= set(names)
        for name in names:
            assert IDENTIFIER.match(name), name

    def test_operation_names_are_identifiers(self, ir: dict[str, Any]) -> None:
        operation = ir["paths"]["/2fa/verify"]["post"]
        assert operation["operationId"] == "_2faVerify"
        assert operation["x-fn-name"] == "_2faVerify"

    def test_parameter_objects_are_hoisted(self, ir: dict[str, Any]) -> None:
        schemas = ir["components"]["schemas"]
        assert schemas["_2faVerifyInput"]["x-properties"]["filter"] == {
            "x-in": "query",
            "$ref": "#/components/schemas/_2faVerifyInputFilter",
        }
        assert schemas["_2faVerifyInputFilter"]["properties"]["range"] == {
            "$ref": "#/components/schemas/_2faVerifyInputFilterRange"
        }
        assert "x-in" not in schemas["_2faVerifyInputFilter"]

    def test_no_inline_composites_remain(self, ir: dict[str, Any]) -> None:
        for name, schema in ir["components"]["schemas"].items():
            assert _inline_composites(schema) == [], name

    def test_petstore_names_are_identifiers(self, petstore_ir: dict[str, Any]) -> None:
        for name in petstore_ir["components"]["schemas"]:
            assert IDENTIFIER.match(name), name


# ---------------------------------------------------------------------------
# Petstore IR
# ---------------------------------------------------------------------------


class TestPetstoreSchemas:
    """Test normalized and hoisted component schemas."""

    def test_single_enum_became_const(self, petstore_ir: dict[str, Any]) -> None:
        status = petstore_ir["components"]["schemas"]["Pet"]["properties"]["status"]
        assert status["const"] == "available"
        assert status["default"] == "available"

    def test_all_of_merged(self, petstore_ir: dict[str, Any]) -> None:
        new_pet = petstore_ir["components"]["schemas"]["NewPet"]
        assert "allOf" not in new_pet
        assert new_pet["type"] == "object"
        assert list(new_pet["properties"]) == ["name", "tag"]
        assert new_pet["required"] == ["name"]

    def test_union_variants_and_hoisting(self, petstore_ir: dict[str, Any]) -> None:
        schemas = petstore_ir["components"]["schemas"]
        pet = schemas["Pet"]
        assert pet["properties"]["birthday"] == {"$ref": "#/components/schemas/PetBirthday"}
        assert pet["properties"]["owner"] == {"$ref": "#/components/schemas/PetOwner"}
        birthday = schemas["PetBirthday"]
        assert [v["name"] for v in birthday["x-variants"]] == ["dateTime", "text", "active"]
        assert birthday["oneOf"][2] == {"$ref": "#/components/schemas/PetBirthdayActive"}

    def test_io_components(self, petstore_ir: dict[str, Any]) -> None:
        schemas = petstore_ir["components"]["schemas"]
        for name in (
            "ListPets",
            "ListPetsInput",
            "CreatePet",
            "ShowPetById",
            "DeletePetsPetId",
            "DeletePetsPetId204",
            "ListUsers",
            "ListUsersInput",
            "ListUsersUsersEntry",
        ):
            assert name in schemas, name
        assert "CreatePet201" not in schemas
        assert schemas["Pet"]["x-responsebody"] is True
        assert schemas["DeletePetsPetId204"]["x-stream"] is True
        assert schemas["ListPets"]["x-response-group"] == "listPets"

    def test_input_properties(self, petstore_ir: dict[str, Any]) -> None:
        schemas = petstore_ir["components"]["schemas"]
        list_input = schemas["ListPetsInput"]
        assert list(list_input["x-properties"]) == ["page", "limit", "authorization"]
        assert list_input["x-properties"]["authorization"]["x-in"] == "header"
        assert list_input["x-required"] == []
        assert schemas["CreatePet"]["x-required"] == ["name"]
        assert schemas["ShowPetById"]["x-properties"]["petId"]["x-in"] == "path"
        assert schemas["ShowPetById"]["x-required"] == ["petId"]


class TestPetstoreOperations:
    """Test the tuned operation table."""

    def test_operation_ids(self, petstore_ir: dict[str, Any]) -> None:
        assert list(_operations(petstore_ir)) == [
            "listPets",
            "createPet",
            "showPetById",
            "deletePetsPetId",
            "listUsers",
        ]

    def test_tags(self, petstore_ir: dict[str, Any]) -> None:
        operations = _operations(petstore_ir)
        assert operations["deletePetsPetId"]["tags"] == ["pets"]
        assert operations["listUsers"]["tags"] == ["users"]
        assert collect_tags(petstore_ir) == ["pets", "users"]
        assert petstore_ir["x-tagGroups"] == [{"name": "API", "tags": ["pets", "users"]}]

    def test_function_names(self, petstore_ir: dict[str, Any]) -> None:
        operations = _operations(petstore_ir)
        assert operations["deletePetsPetId"]["x-fn-name"] == "delete"
        assert operations["listPets"]["x-fn-name"] == "listPets"

    def test_response_names(self, petstore_ir: dict[str, Any]) -> None:
        operations = _operations(petstore_ir)
        assert operations["listPets"]["responses"]["200"]["x-response-name"] == "ListPets"
        assert operations["createPet"]["responses"]["201"]["x-response-name"] == "Pet"
        assert "x-response-name" not in operations["listPets"]["responses"]["400"]

    def test_pagination(self, petstore_ir: dict[str, Any]) -> None:
        operations = _operations(petstore_ir)
        assert operations["listPets"]["x-pagination"] == {
            "type": "page",
            "items": "data",
            "hasMore": "has_more",
            "pageNumberParamName": "page",
            "pageNumberKeyword": "page",
            "pageSizeParamName": "limit",
            "pageSizeKeyword": "limit",
        }
        assert operations["listUsers"]["x-pagination"] == {
            "type": "offset",
            "items": "users",
            "hasMore": "hasMore",
            "offsetParamName": "offset",
            "offsetKeyword": "offset",
            "limitParamName": "limit",
            "limitKeyword": "limit",
        }
        for operation_id in ("createPet", "showPetById", "deletePetsPetId"):
            assert "x-pagination" not in operations[operation_id]

    def test_docs_tree(self, petstore_ir: dict[str, Any]) -> None:
        (category,) = petstore_ir["x-docs"]
        assert category["id"] == "overview"
        assert [item["id"] for item in category["items"]] == [
            "generated-introduction",
            "authorization",
            "errors",
            "generated-pagination",
        ]

    def test_pagination_disabled(self, petstore_raw: dict[str, Any]) -> None:
        ir = build_ir(petstore_raw, GenerateConfig(pagination=PaginationConfig(enabled=False)))
        assert all("x-pagination" not in op for op in _operations(ir).values())
        assert len(ir["x-docs"][0]["items"]) == 3

    def test_declared_tag_groups_kept(self, petstore_raw: dict[str, Any]) -> None:
        petstore_raw["x-tagGroups"] = [{"name": "Animals", "tags": ["pets"]}]
        ir = build_ir(petstore_raw)
        assert ir["x-tagGroups"] == [{"name": "Animals", "tags": ["pets"]}]
