"""
Field catalog: which scouted measurements are comparable and where to find them
in the official score breakdown. Supplied per game/season; injected into the
extractor and comparator rather than held as module state.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from shared.models.enums import FieldKind, GamePhase, MappingType
from shared.utils.logging import get_logger

logger = get_logger(__name__)


class FieldMapping(BaseModel):
    """One comparable field and its path(s) into the score breakdown."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    label: str = ""
    category: str
    kind: FieldKind = FieldKind.ACTION
    path: Union[str, list[str]] = Field(validation_alias=AliasChoices("path", "tbaPath", "tba_path"))
    type: MappingType = MappingType.COUNT
    match_value: Optional[Union[str, list[str]]] = Field(
        default=None, validation_alias=AliasChoices("match_value", "matchValue")
    )
    points: Optional[float] = None

    @property
    def display_label(self) -> str:
        return self.label or self.key


class ValidationCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str = ""
    phase: Optional[GamePhase] = None


class FieldCatalog:
    """Ordered, read-only collection of field mappings (actions first, then toggles)."""

    def __init__(
        self,
        actions: list[FieldMapping],
        toggles: list[FieldMapping],
        categories: Optional[list[ValidationCategory]] = None,
    ) -> None:
        self._actions = tuple(actions)
        self._toggles = tuple(toggles)
        self._categories = tuple(categories or ())
        self._by_key: dict[str, FieldMapping] = {}
        for mapping in (*self._actions, *self._toggles):
            if mapping.key in self._by_key:
                raise ValueError(f"Duplicate field key in catalog: {mapping.key}")
            self._by_key[mapping.key] = mapping

    @classmethod
    def from_dict(cls, schema: dict[str, Any]) -> FieldCatalog:
        """
        Build from a game-schema style dict:

            {"categories": [{"key", "label", "phase"}],
             "actionMappings": {key: {"tbaPath", "type", "category", ...}},
             "toggleMappings": {key: {...}},
             "labels": {key: label}}
        """
        labels: dict[str, str] = schema.get("labels") or {}

        def build(section: str, kind: FieldKind) -> list[FieldMapping]:
            out: list[FieldMapping] = []
            for key, raw in (schema.get(section) or {}).items():
                data = {**raw, "key": key, "kind": kind}
                data.setdefault("label", labels.get(key, ""))
                out.append(FieldMapping.model_validate(data))
            return out

        categories = [ValidationCategory.model_validate(c) for c in schema.get("categories") or []]
        catalog = cls(
            build("actionMappings", FieldKind.ACTION),
            build("toggleMappings", FieldKind.TOGGLE),
            categories,
        )
        logger.debug(
            "field_catalog_loaded",
            actions=len(catalog.actions),
            toggles=len(catalog.toggles),
            categories=len(catalog.categories),
        )
        return catalog

    @property
    def actions(self) -> tuple[FieldMapping, ...]:
        return self._actions

    @property
    def toggles(self) -> tuple[FieldMapping, ...]:
        return self._toggles

    @property
    def categories(self) -> tuple[ValidationCategory, ...]:
        return self._categories

    def __iter__(self) -> Iterator[FieldMapping]:
        yield from self._actions
        yield from self._toggles

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> list[str]:
        return [m.key for m in self]

    def get(self, key: str) -> Optional[FieldMapping]:
        return self._by_key.get(key)

    def label_for(self, key: str) -> str:
        mapping = self._by_key.get(key)
        return mapping.display_label if mapping else key

    def mappings_for_category(self, category: str) -> list[FieldMapping]:
        return [m for m in self if m.category == category]

    def _category(self, key: str) -> Optional[ValidationCategory]:
        return next((c for c in self._categories if c.key == key), None)

    def category_label(self, key: str) -> str:
        category = self._category(key)
        return category.label if category and category.label else key

    def category_phase(self, key: str) -> Optional[GamePhase]:
        category = self._category(key)
        return category.phase if category else None


def load_catalog(path: Union[str, Path]) -> FieldCatalog:
    """Load a catalog from a JSON game-schema file."""
    with open(path, encoding="utf-8") as f:
        return FieldCatalog.from_dict(json.load(f))
