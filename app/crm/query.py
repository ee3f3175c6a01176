"""
OData query descriptors for the CRM Web API.

Entity-set and field names go into the query verbatim; they come from the
entity schemas, never from user input. Only the record id is URL-quoted.
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from app.crm.schema import EntitySchema


@dataclass(frozen=True)
class Expand:
    """Single related-entity expansion, e.g. madmv_OwnerInfo($select=madmv_fullname)."""

    navigation: str
    fields: tuple[str, ...] = ()

    def to_clause(self) -> str:
        if not self.fields:
            return self.navigation
        return f"{self.navigation}($select={','.join(self.fields)})"


@dataclass(frozen=True)
class QueryDescriptor:
    entity_set: str = ""
    select: tuple[str, ...] = ()
    record_id: str | None = None
    expand: Expand | None = None

    @classmethod
    def empty(cls) -> "QueryDescriptor":
        return cls()

    @property
    def valid(self) -> bool:
        if not self.entity_set:
            return False
        if self.record_id is not None and not self.record_id.strip():
            return False
        return True

    @property
    def is_single(self) -> bool:
        return self.record_id is not None

    def to_path(self) -> str:
        path = self.entity_set
        if self.record_id is not None:
            path += f"({urllib.parse.quote(self.record_id.strip(), safe='')})"
        params: list[str] = []
        if self.select:
            params.append("$select=" + ",".join(self.select))
        if self.expand is not None:
            params.append("$expand=" + self.expand.to_clause())
        if params:
            path += "?" + "&".join(params)
        return path


def _field_list(schema: "EntitySchema", fields: Iterable[str]) -> tuple[str, ...]:
    out: list[str] = [schema.id_field]
    for f in fields:
        if f and f not in out:
            out.append(f)
    return tuple(out)


def build_list_query(schema: "EntitySchema", fields: Iterable[str]) -> QueryDescriptor:
    """All records of the entity set, projected to `fields` plus the id field."""
    return QueryDescriptor(entity_set=schema.entity_set, select=_field_list(schema, fields))


def build_single_record_query(
    schema: "EntitySchema",
    record_id: str | None,
    fields: Iterable[str],
    expand: Expand | None = None,
) -> QueryDescriptor:
    """One record by id. A blank id yields the invalid empty descriptor."""
    rid = (record_id or "").strip()
    if not rid:
        return QueryDescriptor.empty()
    return QueryDescriptor(
        entity_set=schema.entity_set,
        select=_field_list(schema, fields),
        record_id=rid,
        expand=expand,
    )
