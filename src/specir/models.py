"""Canonical Pydantic models shared across all specir modules.

The IR itself stays a plain ``dict`` so that emitters can treat its JSON shape
as a stable contract. Everything that the compiler *computes about* the
document is modelled here instead. The models fall into three groups:

**Configuration models** -- loaded from ``specir.json`` or built in code:
    :class:`PaginationConfig`, :class:`ResponsesConfig`,
    :class:`NamingConfig`, and :class:`GenerateConfig`.

**Compiler output models** -- serialised into vendor extensions of the IR:
    :class:`Variant` (``x-variants``), the pagination guesses
    :class:`OffsetPagination`, :class:`PagePagination`,
    :class:`CursorPagination`, :class:`NoPagination` (``x-pagination``), and
    the docs tree :class:`NavItem` / :class:`CategoryItem` (``x-docs``).

**Iteration helpers** -- :class:`HTTPMethod`, :class:`ParameterLocation`,
    and :class:`OperationEntry`.

All models use Pydantic v2. Models written into the IR use camelCase
aliases and are dumped with ``by_alias=True, exclude_none=True``.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from specir.keywords import (
    DART_KEYWORDS,
    SCHEMA_RESERVED_NAMES,
    SDK_RESERVED_NAMES,
    TYPESCRIPT_KEYWORDS,
)


# --- Configuration ---


class PaginationConfig(BaseModel):
    """Controls pagination detection for list-like operations.

    When ``enabled`` is ``False`` no operation carries ``x-pagination``.
    When ``guess`` is ``False`` only pagination declared in the document
    itself (an existing ``x-pagination`` extension) is kept.
    """

    enabled: bool = Field(default=True, description="Attach pagination metadata")
    guess: bool = Field(
        default=True, description="Infer the strategy from parameters and responses"
    )


class ResponsesConfig(BaseModel):
    """Controls how operation responses are tuned."""

    flatten_error_responses: bool = Field(
        default=False,
        description="Hoist non-2xx response bodies into named components too",
    )


class NamingConfig(BaseModel):
    """Reserved-word tables consulted by the naming rules.

    Defaults target the TypeScript client. Every set can be replaced
    independently for another target.
    """

    keywords: frozenset[str] = Field(
        default=TYPESCRIPT_KEYWORDS,
        description="Language keywords that cannot be used as tag identifiers",
    )
    sdk_names: frozenset[str] = Field(
        default=SDK_RESERVED_NAMES,
        description="Names taken by the generated client runtime",
    )
    schema_reserved: frozenset[str] = Field(
        default=SCHEMA_RESERVED_NAMES,
        description="Component names that must never be generated",
    )
    enum_reserved: frozenset[str] = Field(
        default=DART_KEYWORDS,
        description="Words escaped when formatting enum values",
    )


class OperationIdStrategy(str, enum.Enum):
    """Built-in strategies for computing the initial operation ID."""

    AUTO = "auto"
    """Explicit ``operationId``, then ``x-oaiMeta.name``, then method + path."""

    PATH = "path"
    """Always derive the ID from method + path, ignoring ``operationId``."""


OperationIdFn = Callable[[dict[str, Any], str, str], str]
"""``(operation, path, method) -> operation ID`` override signature."""

TagFn = Callable[[dict[str, Any], str], str]
"""``(operation, path) -> tag`` override signature."""


class GenerateConfig(BaseModel):
    """Options for a single :func:`~specir.compiler.ir.build_ir` run.

    Example::

        GenerateConfig(
            pagination=PaginationConfig(guess=False),
            responses=ResponsesConfig(flatten_error_responses=True),
        )
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    responses: ResponsesConfig = Field(default_factory=ResponsesConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    operation_id_strategy: OperationIdStrategy = OperationIdStrategy.AUTO
    operation_id: Optional[OperationIdFn] = Field(
        default=None, exclude=True, description="Custom operation ID function"
    )
    tag: Optional[TagFn] = Field(
        default=None, exclude=True, description="Custom tag function"
    )


# --- Variants ---


class Variant(BaseModel):
    """A named descriptor for one member of a ``oneOf``/``anyOf`` list.

    ``position`` is the member's index in the original combinator list.
    ``priority`` is only set for members whose name came from a specific
    signal (a ``const`` value or a ``format``); unprioritized variants
    sort after prioritized ones.
    """

    name: str
    type: str
    position: int
    priority: Optional[int] = None
    subtype: Optional[str] = None
    source: Optional[str] = None
    static: Optional[bool] = None


# --- Pagination ---


class _PaginationBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: str = Field(description="Response property holding the page items")
    has_more: str = Field(
        alias="hasMore",
        description="Response property (dotted for nested) signalling more pages",
    )


class OffsetPagination(_PaginationBase):
    """Offset/limit pagination (``?offset=20&limit=10``)."""

    type: Literal["offset"] = "offset"
    offset_param_name: str = Field(alias="offsetParamName")
    offset_keyword: str = Field(alias="offsetKeyword")
    limit_param_name: str = Field(alias="limitParamName")
    limit_keyword: str = Field(alias="limitKeyword")


class PagePagination(_PaginationBase):
    """Page-number pagination (``?page=3&per_page=50``)."""

    type: Literal["page"] = "page"
    page_number_param_name: str = Field(alias="pageNumberParamName")
    page_number_keyword: str = Field(alias="pageNumberKeyword")
    page_size_param_name: str = Field(alias="pageSizeParamName")
    page_size_keyword: str = Field(alias="pageSizeKeyword")


class CursorPagination(_PaginationBase):
    """Cursor/token pagination (``?after=abc&limit=10``)."""

    type: Literal["cursor"] = "cursor"
    cursor_param_name: str = Field(alias="cursorParamName")
    cursor_keyword: str = Field(alias="cursorKeyword")
    limit_param_name: str = Field(alias="limitParamName")
    limit_keyword: str = Field(alias="limitKeyword")


class NoPagination(BaseModel):
    """No pagination detected, with the reason the detector gave up."""

    type: Literal["none"] = "none"
    reason: str


PaginationGuess = Annotated[
    Union[OffsetPagination, PagePagination, CursorPagination, NoPagination],
    Field(discriminator="type"),
]


# --- Docs tree ---


class NavItem(BaseModel):
    """A single documentation page."""

    id: str
    title: str
    url: str
    description: Optional[str] = None
    content: Optional[str] = None


class CategoryItem(BaseModel):
    """A titled group of documentation pages."""

    id: str
    category: str
    description: Optional[str] = None
    items: list[NavItem] = Field(default_factory=list)


# --- Iteration helpers ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations under a path item."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Where an API parameter is sent."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class OperationEntry(BaseModel):
    """Where an operation lives in the IR."""

    method: HTTPMethod
    path: str
    tag: Optional[str] = None
