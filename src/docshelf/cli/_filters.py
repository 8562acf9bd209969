"""CLI filter parser: converts --where clauses to a FilterQuery."""

from __future__ import annotations

import json
from typing import Any

from docshelf.errors import FilterError
from docshelf.filters import EXPRESSIONS, FilterQuery

# Map CLI operator tokens to comparator tokens
_OP_MAP: dict[str, str] = {
    "eq": "=",
    "ne": "<>",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "=": "=",
    "==": "=",
    "!=": "<>",
    "<>": "<>",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
}


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_where_clauses(clauses: list[str]) -> FilterQuery:
    """Parse ``[AND|OR] PROP OP VALUE`` clauses into a FilterQuery.

    The first clause is the WHERE; later clauses default to AND. VALUE is
    decoded as JSON when possible, otherwise taken as a plain string.
    """
    query = FilterQuery()
    for i, clause in enumerate(clauses):
        parts = clause.split(None, 3)
        expression = "WHERE" if i == 0 else "AND"
        if len(parts) == 4 and parts[0].upper() in EXPRESSIONS:
            keyword, parts = parts[0].upper(), parts[1:]
            if i > 0:
                expression = keyword
        else:
            parts = clause.split(None, 2)
        if len(parts) != 3:
            raise FilterError(
                f"Invalid --where clause (expected '[AND|OR] PROP OP VALUE'): {clause}"
            )
        prop, op_token, raw_value = parts
        op = _OP_MAP.get(op_token.lower())
        if op is None:
            raise FilterError(
                f"Unknown filter operator '{op_token}'. "
                f"Valid operators: {', '.join(sorted(_OP_MAP.keys()))}"
            )
        query.add(expression, prop, op, _parse_value(raw_value))
    return query
