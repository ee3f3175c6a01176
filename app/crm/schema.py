from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from app.crm.option_sets import OptionSetMapping
from app.crm.query import Expand


@dataclass(frozen=True)
class Column:
    label: str
    field: str


@dataclass(frozen=True)
class DetailField:
    label: str
    name: str
    readonly: bool = False


@dataclass(frozen=True)
class CreateField:
    """One input of a create form. `transform` is a key of formatting.TRANSFORMS."""

    name: str
    label: str
    backend_field: str
    transform: str = "none"
    input_type: str = "text"
    placeholder: str = ""
    max_length: int | None = None
    options: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class FlattenedField:
    """Copies a value out of an expanded related entity onto the record."""

    name: str
    navigation: str
    source_field: str


@dataclass(frozen=True)
class EntitySchema:
    entity_type: str
    title: str
    entity_set: str
    id_field: str
    columns: tuple[Column, ...]
    option_sets: tuple[OptionSetMapping, ...] = ()
    row_action: str = "delete"
    has_detail: bool = True
    detail_fields: tuple[DetailField, ...] = ()
    detail_expand: Expand | None = None
    flattened: tuple[FlattenedField, ...] = ()
    detail_layout: Callable[[dict[str, Any]], tuple[DetailField, ...]] | None = None
    create_fields: tuple[CreateField, ...] = ()
    undo_action: str | None = None
    related_types: tuple[str, ...] = ()

    def field_names(self) -> list[str]:
        return [c.field for c in self.columns]

    def detail_field_names(self) -> list[str]:
        flat = {f.name for f in self.flattened}
        return [f.name for f in self.detail_fields if f.name not in flat]

    def layout_for(self, record: dict[str, Any]) -> tuple[DetailField, ...]:
        if self.detail_layout is not None:
            return self.detail_layout(record)
        return self.detail_fields

    def detail_href(self, record_id: Any) -> str:
        return f"/#/{self.entity_type}Details/{record_id}"

    def create_field_map(self) -> dict[str, str]:
        return {f.name: f.backend_field for f in self.create_fields}


class UnknownEntityType(KeyError):
    pass


class SchemaRegistry:
    def __init__(self, schemas: list[EntitySchema] | tuple[EntitySchema, ...]):
        self._by_type = {s.entity_type: s for s in schemas}

    def get(self, entity_type: str) -> EntitySchema:
        try:
            return self._by_type[entity_type]
        except KeyError:
            raise UnknownEntityType(entity_type) from None

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._by_type

    def __iter__(self):
        return iter(self._by_type.values())

    def types(self) -> list[str]:
        return list(self._by_type)
