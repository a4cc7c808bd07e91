"""Tests for specir.compiler.operations."""

from __future__ import annotations

from typing import Any

from specir.compiler.naming import camelcase
from specir.compiler.operations import (
    Resource,
    build_operations,
    default_operation_id,
    find_unique_operation_id,
    for_each_operation,
    merge_parameters,
    path_operation_id,
    to_openapi_path,
    to_resource,
)
from specir.models import GenerateConfig, OperationIdStrategy, PaginationConfig


def _ok() -> dict[str, Any]:
    return {"200": {"description": "OK", "content": {"application/json": {"schema": {"type": "string"}}}}}


PAGED_RESPONSE = {
    "200": {
        "description": "OK",
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "data": {"type": "array", "items": {"type": "string"}},
                        "has_more": {"type": "boolean"},
                    },
                }
            }
        },
    }
}

PAGE_PARAMS = [
    {"name": "page", "in": "query", "schema": {"type": "integer"}},
    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
]


# ---------------------------------------------------------------------------
# Paths and function names
# ---------------------------------------------------------------------------


class TestPathsAndResources:
    """Test path rewriting and SDK function naming."""

    def test_express_params_rewritten(self) -> None:
        assert to_openapi_path("/users/:id/posts/:postId") == "/users/{id}/posts/{postId}"
        assert to_openapi_path("/users/{id}") == "/users/{id}"

    def test_crud_verbs(self) -> None:
        assert to_resource({}, "/users/{id}", "delete") == Resource(name="delete", group="users")
        assert to_resource({}, "/users", "get") == Resource(name="list", group="users")
        assert to_resource({}, "/users", "post").name == "create"
        assert to_resource({}, "/users/{id}", "put").name == "replace"

    def test_nested_collection_group(self) -> None:
        assert to_resource({}, "/orgs/{org}/members", "get") == Resource(
            name="list", group="orgsMembers"
        )

    def test_root_path(self) -> None:
        assert to_resource({}, "/", "get") == Resource(name="list", group="root")

    def test_operation_id_and_meta_win(self) -> None:
        assert to_resource({"operationId": "pets#list-v2"}, "/pets", "get") == Resource(
            name="listV2", group="pets"
        )
        assert to_resource({"x-oaiMeta": {"path": "retrieve"}}, "/models/{model}", "get") == Resource(
            name="retrieve", group="models"
        )


class TestOperationIds:
    """Test initial IDs and collision handling."""

    def test_path_operation_id(self) -> None:
        assert path_operation_id({}, "/users/{id}", "get") == "getUsersId"

    def test_default_operation_id_preference(self) -> None:
        assert default_operation_id({"operationId": "list-pets"}, "/pets", "get") == "listPets"
        assert default_operation_id({"x-oaiMeta": {"name": "List models"}}, "/m", "get") == "listModels"
        assert default_operation_id({}, "/pets", "post") == "postPets"

    def test_collision_prefixes_choices_then_counts(self) -> None:
        used = {"list"}
        choices = ["pets", "get", "pets"]
        first = find_unique_operation_id(used, "list", choices, camelcase)
        assert first == "petsList"
        used.add(first)
        second = find_unique_operation_id(used, "list", choices, camelcase)
        assert second == "getList"
        used.add(second)
        third = find_unique_operation_id(used, "list", choices, camelcase)
        assert third == "petsList1"

    def test_free_id_is_kept(self) -> None:
        assert find_unique_operation_id(set(), "list", ["pets"], camelcase) == "list"


class TestMergeParameters:
    """Test path-level and operation-level parameter merging."""

    def test_operation_level_overrides_by_name_and_location(self) -> None:
        spec = {"components": {"parameters": {"Verbose": {"name": "verbose", "in": "query"}}}}
        path_item = {
            "parameters": [
                {"name": "id", "in": "path", "required": True},
                {"name": "limit", "in": "query"},
            ]
        }
        operation = {
            "parameters": [
                {"name": "limit", "in": "query", "required": True},
                {"name": "limit", "in": "header"},
                {"$ref": "#/components/parameters/Verbose"},
            ]
        }
        merged = merge_parameters(spec, path_item, operation)
        assert [(p["name"], p["in"]) for p in merged] == [
            ("id", "path"),
            ("limit", "query"),
            ("limit", "header"),
            ("verbose", "query"),
        ]
        assert merged[1]["required"] is True


# ---------------------------------------------------------------------------
# build_operations
# ---------------------------------------------------------------------------


class TestBuildOperations:
    """Test the tuned operation table."""

    def test_ids_are_unique_across_document(self) -> None:
        spec = {
            "paths": {
                "/pets": {"get": {"operationId": "list", "responses": _ok()}},
                "/users": {"get": {"operationId": "list", "responses": _ok()}},
            }
        }
        build_operations(spec)
        ids = [op["operationId"] for op in for_each_operation(spec, lambda entry, op: op)]
        assert ids == ["list", "usersList"]

    def test_tuned_fields(self) -> None:
        spec = {"paths": {"/user-profiles/:id": {"get": {"tags": ["User Profiles"], "responses": _ok()}}}}
        paths = build_operations(spec)
        operation = paths["/user-profiles/{id}"]["get"]
        assert operation["operationId"] == "getUserProfilesId"
        assert operation["tags"] == ["user_profiles"]
        assert operation["x-fn-group"] == "User Profiles"
        assert operation["x-fn-name"] == "get"
        assert operation["requestBody"]["content"]["application/empty"]

    def test_path_strategy_ignores_operation_id(self) -> None:
        spec = {"paths": {"/pets": {"get": {"operationId": "listPets", "responses": _ok()}}}}
        config = GenerateConfig(operation_id_strategy=OperationIdStrategy.PATH)
        build_operations(spec, config)
        assert spec["paths"]["/pets"]["get"]["operationId"] == "getPets"

    def test_custom_callables(self) -> None:
        spec = {"paths": {"/pets": {"get": {"responses": _ok()}}}}
        config = GenerateConfig(
            operation_id=lambda operation, path, method: f"{method}Everything",
            tag=lambda operation, path: "zoo",
        )
        build_operations(spec, config)
        operation = spec["paths"]["/pets"]["get"]
        assert operation["operationId"] == "getEverything"
        assert operation["tags"] == ["zoo"]

    def test_operation_security_overrides_global(self) -> None:
        spec = {
            "security": [{"bearerAuth": []}],
            "components": {"securitySchemes": {"bearerAuth": {"type": "http", "scheme": "bearer"}}},
            "paths": {
                "/public": {"get": {"operationId": "open", "security": [], "responses": _ok()}},
                "/private": {"get": {"operationId": "closed", "responses": _ok()}},
            },
        }
        build_operations(spec)
        schemas = spec["components"]["schemas"]
        assert "authorization" not in schemas["OpenInput"]["x-properties"]
        assert "authorization" in schemas["ClosedInput"]["x-properties"]

    def test_pagination_is_detected(self) -> None:
        spec = {"paths": {"/pets": {"get": {"parameters": PAGE_PARAMS, "responses": PAGED_RESPONSE}}}}
        build_operations(spec)
        pagination = spec["paths"]["/pets"]["get"]["x-pagination"]
        assert pagination["type"] == "page"
        assert pagination["items"] == "data"
        assert pagination["hasMore"] == "has_more"

    def test_pagination_disabled(self) -> None:
        spec = {
            "paths": {
                "/pets": {
                    "get": {
                        "parameters": PAGE_PARAMS,
                        "responses": PAGED_RESPONSE,
                        "x-pagination": {"type": "cursor"},
                    }
                }
            }
        }
        build_operations(spec, GenerateConfig(pagination=PaginationConfig(enabled=False)))
        assert "x-pagination" not in spec["paths"]["/pets"]["get"]

    def test_declared_pagination_kept_without_guessing(self) -> None:
        declared = {"type": "cursor", "items": "data"}
        spec = {"paths": {"/pets": {"get": {"x-pagination": declared, "responses": _ok()}}}}
        build_operations(spec, GenerateConfig(pagination=PaginationConfig(guess=False)))
        assert spec["paths"]["/pets"]["get"]["x-pagination"] == declared

    def test_unpaginated_operation_has_no_block(self) -> None:
        spec = {"paths": {"/pets": {"get": {"responses": _ok()}}}}
        build_operations(spec)
        assert "x-pagination" not in spec["paths"]["/pets"]["get"]


class TestForEachOperation:
    """Test iteration over a built table."""

    def test_entries_in_document_order(self) -> None:
        spec = {
            "paths": {
                "/pets": {
                    "post": {"tags": ["pets"]},
                    "get": {"tags": ["pets"]},
                    "summary": "not an operation",
                },
                "/misc": {"delete": {}},
            }
        }
        entries = for_each_operation(spec, lambda entry, op: (entry.method.value, entry.path, entry.tag))
        assert entries == [
            ("get", "/pets", "pets"),
            ("post", "/pets", "pets"),
            ("delete", "/misc", None),
        ]
