"""
Write actions against the CRM: create, update, delete and undo.

Views treat these as fire-and-forget. A failed write is logged and reported as
False; it never raises into the view. A successful write resets the affected
stores so the next list visit reloads from the CRM.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from app.crm.client import CRMClient
    from app.crm.schema import EntitySchema, SchemaRegistry
    from app.crm.store import StoreRegistry

logger = logging.getLogger(__name__)

CONFIRM_MESSAGE = "Are you sure you wish to delete this item?"


class ActionDispatcher:
    def __init__(self, client: "CRMClient", schemas: "SchemaRegistry", stores: "StoreRegistry"):
        self.client = client
        self.schemas = schemas
        self.stores = stores

    def _invalidate(self, schema: "EntitySchema") -> None:
        self.stores.reset(schema.entity_type, *schema.related_types)

    def _run(self, action: str, schema: "EntitySchema", record_id: str | None, fn: Callable[[], Any]) -> bool:
        try:
            fn()
        except Exception as e:
            logger.error("CRM %s failed (entity_type=%s id=%s): %s", action, schema.entity_type, record_id, e)
            return False
        logger.info("CRM %s ok (entity_type=%s id=%s)", action, schema.entity_type, record_id)
        self._invalidate(schema)
        return True

    def create(self, entity_type: str, payload: dict[str, Any]) -> bool:
        schema = self.schemas.get(entity_type)
        body = to_backend_payload(schema, payload)
        return self._run("create", schema, None, lambda: self.client.create_record(schema.entity_set, body))

    def update(self, entity_type: str, record_id: str, payload: dict[str, Any]) -> bool:
        schema = self.schemas.get(entity_type)
        body = {k: v for k, v in payload.items() if k != schema.id_field}
        return self._run(
            "update", schema, record_id, lambda: self.client.update_record(schema.entity_set, record_id, body)
        )

    def delete(self, entity_type: str, record_id: str) -> bool:
        schema = self.schemas.get(entity_type)
        return self._run("delete", schema, record_id, lambda: self.client.delete_record(schema.entity_set, record_id))

    def undo(self, entity_type: str, record_id: str) -> bool:
        schema = self.schemas.get(entity_type)
        if not schema.undo_action:
            logger.error("Undo requested for %s, which has no undo action configured", entity_type)
            return False
        action = schema.undo_action
        return self._run(
            "undo", schema, record_id, lambda: self.client.invoke_action(schema.entity_set, record_id, action)
        )


def to_backend_payload(schema: "EntitySchema", state: dict[str, Any]) -> dict[str, Any]:
    """Map create-form state keys onto CRM field names; blanks and unknown keys are dropped."""
    field_map = schema.create_field_map()
    body: dict[str, Any] = {}
    for key, value in state.items():
        backend = field_map.get(key)
        if not backend:
            continue
        if value is None or (isinstance(value, str) and value == ""):
            continue
        body[backend] = value
    return body


@dataclass(frozen=True)
class RowActionHandler:
    """A per-row destructive action. Dispatch happens only after confirm() says yes."""

    kind: str
    label: str
    css: str
    dispatch: Callable[["ActionDispatcher", str, str], bool]

    def invoke(
        self,
        dispatcher: ActionDispatcher,
        entity_type: str,
        record_id: str,
        confirm: Callable[[str], bool],
    ) -> bool:
        if not confirm(CONFIRM_MESSAGE):
            return False
        return self.dispatch(dispatcher, entity_type, record_id)


DeleteHandler = RowActionHandler(
    kind="delete",
    label="Delete",
    css="btn btn-sm btn-danger",
    dispatch=lambda d, t, rid: d.delete(t, rid),
)

UndoHandler = RowActionHandler(
    kind="undo",
    label="Undo",
    css="btn btn-sm btn-danger",
    dispatch=lambda d, t, rid: d.undo(t, rid),
)

ROW_ACTIONS: dict[str, RowActionHandler] = {
    DeleteHandler.kind: DeleteHandler,
    UndoHandler.kind: UndoHandler,
}


def row_action_for(schema: "EntitySchema") -> RowActionHandler:
    return ROW_ACTIONS[schema.row_action]
