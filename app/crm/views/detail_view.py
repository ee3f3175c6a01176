from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.crm.query import build_single_record_query

if TYPE_CHECKING:
    from app.crm.actions import ActionDispatcher
    from app.crm.client import CRMClient
    from app.crm.schema import DetailField, EntitySchema


class DetailView:
    """
    Editable detail form for one record.

    After load() the view holds two copies of the tracked fields: `data` (the
    live edit state) and `olddata` (the record as fetched). Cancel copies
    olddata back over data; Save sends data as an update and keeps it as the
    displayed state without re-reading the record.
    """

    def __init__(self, schema: "EntitySchema"):
        self.schema = schema
        self.loaded = False
        self.disabled = True
        self.data: dict[str, Any] = {}
        self.olddata: dict[str, Any] = {}

    @property
    def record_id(self) -> str:
        return str(self.olddata.get(self.schema.id_field) or "")

    def tracked_fields(self) -> list[str]:
        return [f.name for f in self.schema.detail_fields]

    def editable_fields(self) -> list[str]:
        return [f.name for f in self.schema.detail_fields if not f.readonly]

    def load(self, client: "CRMClient", record_id: str) -> None:
        query = build_single_record_query(
            self.schema,
            record_id,
            self.schema.detail_field_names(),
            self.schema.detail_expand,
        )
        response = client.get_record(query)
        self.olddata = self._flatten(response)
        self.data = {name: self.olddata.get(name) for name in self.tracked_fields()}
        self.loaded = True
        self.disabled = True

    def _flatten(self, response: dict[str, Any]) -> dict[str, Any]:
        record = {k: v for k, v in response.items() if not k.startswith("@odata")}
        for flat in self.schema.flattened:
            related = response.get(flat.navigation)
            record[flat.name] = related.get(flat.source_field) if isinstance(related, dict) else None
            record.pop(flat.navigation, None)
        return record

    def toggle_edit(self) -> None:
        self.disabled = not self.disabled

    def change(self, name: str, value: Any) -> bool:
        if self.disabled or name not in self.editable_fields():
            return False
        self.data[name] = _coerce_like(self.olddata.get(name), value)
        return True

    def display(self, name: str) -> Any:
        value = self.data.get(name)
        if name not in self.editable_fields():
            for mapping in self.schema.option_sets:
                if mapping.get_field() == name:
                    value = mapping.map(value)
        return "" if value is None else value

    def cancel(self) -> None:
        for name in self.tracked_fields():
            self.data[name] = self.olddata.get(name)
        self.disabled = True

    def submit(self, dispatcher: "ActionDispatcher") -> bool:
        payload = {name: self.data.get(name) for name in self.editable_fields()}
        ok = dispatcher.update(self.schema.entity_type, self.record_id, payload)
        self.disabled = True
        return ok

    def sections(self) -> tuple["DetailField", ...]:
        return self.schema.layout_for(self.data)

    def to_draft(self) -> dict[str, Any]:
        return {
            "disabled": self.disabled,
            "data": dict(self.data),
            "olddata": dict(self.olddata),
        }

    @classmethod
    def from_draft(cls, schema: "EntitySchema", draft: dict[str, Any]) -> "DetailView":
        view = cls(schema)
        view.data = dict(draft.get("data") or {})
        view.olddata = dict(draft.get("olddata") or {})
        view.disabled = bool(draft.get("disabled", True))
        view.loaded = True
        return view


def _coerce_like(original: Any, value: Any) -> Any:
    # Form posts are strings; keep numeric CRM fields numeric and untouched
    # empty fields null.
    if isinstance(value, str):
        if value == "" and original is None:
            return None
        if isinstance(original, bool):
            return value.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(original, int):
            try:
                return int(value.strip())
            except ValueError:
                return value
        if isinstance(original, float):
            try:
                return float(value.strip())
            except ValueError:
                return value
    return value
