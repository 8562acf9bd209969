"""Filter descriptions for collection queries and their SQL translation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from docshelf.errors import FilterError
from docshelf.indexing import (
    INDEX_TYPES,
    METADATA_FIELDS,
    REGISTRY,
    VALUE,
    encode_index_value,
    fits_sqlite_integer,
)

EXPRESSIONS = ("WHERE", "AND", "OR")

# Map accepted comparator tokens to SQL operators
_COMPARATORS: dict[str, str] = {
    "=": "=",
    "==": "=",
    "<>": "<>",
    "!=": "<>",
    ">": ">",
    "<": "<",
    ">=": ">=",
    "<=": "<=",
}

# Metadata properties that live on the driving index row itself
_METADATA_COLUMNS: dict[str, str] = {"id": "A.id", "origin": "A.origin"}


def _normalize_comparator(token: str) -> str:
    try:
        return _COMPARATORS[token]
    except KeyError:
        raise FilterError(
            f"Unknown comparator '{token}'. Valid comparators: {', '.join(sorted(_COMPARATORS))}"
        ) from None


def _normalize_expression(keyword: str) -> str:
    upper = keyword.upper()
    if upper not in EXPRESSIONS:
        raise FilterError(f"Unknown expression '{keyword}'. Valid expressions: WHERE, AND, OR")
    return upper


@dataclass
class Comparison:
    """One ``expression property comparator value`` step of a filter.

    A comparison built with :meth:`FilterQuery.where` and friends is completed
    by calling one of the comparator methods, which return the owning query so
    calls can be chained.
    """

    expression: str | None
    property: str | None
    comparator: str | None = None
    value: Any = None
    _owner: FilterQuery | None = field(default=None, repr=False, compare=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.expression and self.comparator and self.property)

    def _set(self, comparator: str, value: Any) -> FilterQuery:
        self.comparator = comparator
        self.value = value
        if self._owner is None:
            raise FilterError("comparison is not attached to a FilterQuery")
        return self._owner

    def eq(self, value: Any) -> FilterQuery:
        return self._set("=", value)

    def ne(self, value: Any) -> FilterQuery:
        return self._set("<>", value)

    def gt(self, value: Any) -> FilterQuery:
        return self._set(">", value)

    def lt(self, value: Any) -> FilterQuery:
        return self._set("<", value)

    def ge(self, value: Any) -> FilterQuery:
        return self._set(">=", value)

    def le(self, value: Any) -> FilterQuery:
        return self._set("<=", value)


class FilterQuery:
    """Caller-built description of comparisons, ordering and pagination.

    Usage::

        q = FilterQuery().where("name").eq("ada").and_("age").gt(18)
        q.order_by("age", reverse=True).paginate(offset=0, length=10)
    """

    def __init__(self) -> None:
        self.comparisons: list[Comparison] = []
        self.order_property: str = "origin"
        self.descending: bool = False
        self.offset: int = 0
        self.length: int | None = None
        self.index_type: str = REGISTRY

    def __repr__(self) -> str:
        return (
            f"FilterQuery(comparisons={self.comparisons!r}, "
            f"order_property={self.order_property!r}, "
            f"descending={self.descending!r}, offset={self.offset!r}, length={self.length!r}, "
            f"index_type={self.index_type!r})"
        )

    def _start(self, expression: str, prop: str) -> Comparison:
        comparison = Comparison(expression=expression, property=prop, _owner=self)
        self.comparisons.append(comparison)
        return comparison

    def where(self, prop: str) -> Comparison:
        return self._start("WHERE", prop)

    def and_(self, prop: str) -> Comparison:
        return self._start("AND", prop)

    def or_(self, prop: str) -> Comparison:
        return self._start("OR", prop)

    def add(
        self,
        expression: str | None,
        prop: str | None,
        comparator: str | None = None,
        value: Any = None,
    ) -> FilterQuery:
        """Append a comparison given as raw tokens; incomplete ones are kept as-is."""
        self.comparisons.append(
            Comparison(
                expression=_normalize_expression(expression) if expression else None,
                property=prop,
                comparator=_normalize_comparator(comparator) if comparator else None,
                value=value,
                _owner=self,
            )
        )
        return self

    def order_by(self, prop: str, *, reverse: bool = False) -> FilterQuery:
        if prop in METADATA_FIELDS and prop not in _METADATA_COLUMNS:
            raise FilterError(f"Cannot order by '{prop}': it is not indexed")
        self.order_property = prop
        self.descending = reverse
        return self

    def paginate(self, *, offset: int = 0, length: int | None = None) -> FilterQuery:
        if offset < 0:
            raise FilterError("offset must be >= 0")
        if length is not None and length < 0:
            raise FilterError("length must be >= 0")
        self.offset = offset
        self.length = length
        return self

    def use_index(self, index_type: str) -> FilterQuery:
        if index_type not in INDEX_TYPES:
            raise FilterError(f"Unknown index type '{index_type}'. Valid types: value, registry")
        self.index_type = index_type
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FilterQuery:
        """Build a query from a decoded JSON filter description."""
        try:
            spec = _FilterSpec.model_validate(data)
        except PydanticValidationError as e:
            raise FilterError(f"Invalid filter description: {e}") from e

        query = cls()
        for c in spec.comparisons:
            query.add(c.expression, c.property, c.comparator, c.value)
        direction = spec.direction.upper()
        if direction not in ("ASC", "DESC"):
            raise FilterError(f"Unknown order direction '{spec.direction}'")
        query.order_by(spec.order_by, reverse=spec.reverse or direction == "DESC")
        query.paginate(offset=spec.offset, length=spec.length)
        query.use_index(spec.index_type)
        return query

    @classmethod
    def from_json(cls, text: str) -> FilterQuery:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FilterError(f"Filter is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise FilterError("Filter JSON must be an object")
        return cls.from_mapping(data)


class _ComparisonSpec(BaseModel):
    # prop/comparison/val are accepted alongside the attribute names
    model_config = ConfigDict(populate_by_name=True)

    expression: str | None = None
    property: str | None = Field(default=None, alias="prop")
    comparator: str | None = Field(default=None, alias="comparison")
    value: Any = Field(default=None, alias="val")


class _FilterSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comparisons: list[_ComparisonSpec] = Field(default_factory=list)
    order_by: str = Field(default="origin", alias="orderBy")
    direction: str = "ASC"
    reverse: bool = False
    offset: int = 0
    length: int | None = None
    index_type: str = Field(default=REGISTRY, alias="indexType")


def is_json_filter(text: str) -> bool:
    """True when ``text`` decodes to a JSON object."""
    try:
        return isinstance(json.loads(text), dict)
    except (json.JSONDecodeError, TypeError):
        return False


@dataclass
class TranslatedFilter:
    """SQL fragments and parameters produced from a FilterQuery."""

    joins: str
    join_params: list[Any]
    filters: str
    filter_params: list[Any]
    order: str
    direction: str
    index_type: str
    limit: int
    offset: int

    def select_params(self) -> list[Any]:
        return [*self.join_params, self.index_type, *self.filter_params, self.limit, self.offset]

    def count_params(self) -> list[Any]:
        return [*self.join_params, self.index_type, *self.filter_params]


class FilterTranslator:
    """Compiles a FilterQuery into joins against a collection's index table."""

    def __init__(self, collection: str) -> None:
        self.collection = collection

    def translate(self, query: FilterQuery, *, include_order: bool = True) -> TranslatedFilter:
        aliases: dict[str, str] = {}
        joins: list[str] = []
        join_params: list[Any] = []

        def join(prop: str, kind: str) -> str:
            alias = f"p{len(aliases)}"
            aliases[prop] = alias
            joins.append(
                f"{kind} {self.collection}__index AS {alias} "
                f"ON {alias}.id = A.id AND {alias}.type = ? AND {alias}.property = ? "
            )
            join_params.extend([VALUE, prop])
            return alias

        # One join per distinct property, in first-reference order
        for c in query.comparisons:
            prop = c.property
            if not c.is_complete or prop in aliases:
                continue
            assert prop is not None
            if prop in METADATA_FIELDS:
                if prop not in _METADATA_COLUMNS:
                    raise FilterError(f"Cannot filter on '{prop}': it is not indexed")
                continue
            join(prop, "JOIN")

        parts: list[str] = []
        filter_params: list[Any] = []
        for c in query.comparisons:
            if not c.is_complete:
                continue
            assert c.property is not None and c.comparator is not None
            keyword = "AND" if c.expression == "WHERE" else c.expression
            prefix = f"{keyword} " if parts else ""
            column = _METADATA_COLUMNS.get(c.property) or f"{aliases[c.property]}.value"
            parts.append(prefix + self._compile_comparison(column, c, filter_params))

        order = "A.origin"
        if include_order:
            prop = query.order_property
            if prop in _METADATA_COLUMNS:
                order = _METADATA_COLUMNS[prop]
            elif prop in METADATA_FIELDS:
                raise FilterError(f"Cannot order by '{prop}': it is not indexed")
            else:
                alias = aliases.get(prop) or join(prop, "LEFT JOIN")
                order = f"{alias}.value"

        return TranslatedFilter(
            joins="".join(joins),
            join_params=join_params,
            filters=f" AND ({' '.join(parts)})" if parts else "",
            filter_params=filter_params,
            order=order,
            direction="DESC" if query.descending else "ASC",
            index_type=query.index_type,
            limit=-1 if query.length is None else query.length,
            offset=query.offset,
        )

    @staticmethod
    def _compile_comparison(column: str, c: Comparison, params: list[Any]) -> str:
        sql_op = _normalize_comparator(c.comparator or "")
        if c.value is None:
            if sql_op == "=":
                return f"{column} IS NULL"
            if sql_op == "<>":
                return f"{column} IS NOT NULL"
            return f"{column} {sql_op} NULL"
        value = c.value
        if isinstance(value, bool):
            value = encode_index_value(value)
        elif isinstance(value, int):
            if fits_sqlite_integer(value):
                column = f"CAST({column} AS INTEGER)"
            else:
                column = f"CAST({column} AS REAL)"
                value = float(value)
        elif isinstance(value, str) and column not in _METADATA_COLUMNS.values():
            # Index values keep their SQLite type; text filters compare as text
            column = f"CAST({column} AS TEXT)"
        params.append(value)
        return f"{column} {sql_op} ?"
