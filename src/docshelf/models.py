"""Target model base type and the deep-merge helper used for result mapping."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

M = TypeVar("M", bound="DocumentModel")


class DocumentModel(BaseModel):
    """Base class for typed collection models.

    Undeclared properties are kept as extras so a schemaless document never
    loses data when it is mapped onto a model.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    revision: int | None = None
    updated: str | None = None
    origin: str | None = None


def deep_merge(dest: Any, src: Any) -> Any:
    """Merge ``src`` onto ``dest`` and return the result.

    Nested dicts merge key by key with ``src`` winning, lists keep the items of
    ``dest`` followed by the items of ``src`` not already present, and any other
    value from ``src`` overwrites. ``dest`` is not mutated.
    """
    if isinstance(dest, dict) and isinstance(src, dict):
        merged = dict(dest)
        for key, value in src.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    if isinstance(dest, list) and isinstance(src, list):
        merged_list = list(dest)
        for item in src:
            if item not in merged_list:
                merged_list.append(item)
        return merged_list
    return src


def _model_defaults(model: type[BaseModel]) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if info.is_required():
            continue
        value = info.get_default(call_default_factory=True)
        if isinstance(value, BaseModel):
            value = value.model_dump()
        defaults[name] = value
    return defaults


def hydrate(model: type[M], document: dict[str, Any]) -> M:
    """Build a ``model`` instance from a stored document merged over its defaults."""
    return model.model_validate(deep_merge(_model_defaults(model), document))


def to_document(obj: Any) -> dict[str, Any]:
    """Return a plain dict for a model instance or mapping."""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    return dict(obj)
