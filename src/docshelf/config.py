"""Configuration for docshelf collections."""

from __future__ import annotations

import importlib
import re
from dataclasses import dataclass
from typing import Any, Mapping

from docshelf.errors import ConfigurationError
from docshelf.models import DocumentModel

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# camelCase and snake_case option keys are both accepted
_OPTION_ALIASES = {
    "versionTracking": "version_tracking",
    "version_tracking": "version_tracking",
    "model": "model",
}


@dataclass
class CollectionOptions:
    """Options controlling how a collection stores and returns documents.

    version_tracking: keep every revision instead of pruning old ones on commit.
    model: DocumentModel subclass (or an import path to one) that results are
        mapped onto and that writes must be instances of.
    """

    version_tracking: bool = False
    model: type[DocumentModel] | str | None = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> CollectionOptions:
        """Build options from a plain mapping, ignoring unknown keys."""
        if not options:
            return cls()
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            attr = _OPTION_ALIASES.get(key)
            if attr is not None:
                kwargs[attr] = value
        return cls(**kwargs)

    def validate(self, collection: str) -> type[DocumentModel] | None:
        """Check option types and return the resolved model class, if any."""
        if not _NAME_RE.match(collection):
            raise ConfigurationError(
                "collection names must match [A-Za-z_][A-Za-z0-9_]*", collection=collection
            )
        if not isinstance(self.version_tracking, bool):
            raise ConfigurationError(
                'the option "versionTracking" must be boolean', collection=collection
            )
        if self.model is None:
            return None
        model = _resolve_model(self.model)
        if model is None:
            raise ConfigurationError(
                'the option "model" did not resolve to a DocumentModel class', collection=collection
            )
        return model


def _resolve_model(model: Any) -> type[DocumentModel] | None:
    if isinstance(model, str):
        module_name, sep, attr = model.partition(":")
        if not sep:
            module_name, _, attr = model.rpartition(".")
        if not module_name or not attr:
            return None
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            return None
        model = getattr(module, attr, None)
    if isinstance(model, type) and issubclass(model, DocumentModel):
        return model
    return None
