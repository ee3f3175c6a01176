"""
Generic list view over one entity type.

Input: an EntitySchema (entity type, columns, option-set mappings, row
action) and the entity type's RecordStore.

Output: a ListContent describing which branch to render (loading, failure
or table) and, for the table, the cleaned-up rows with their action buttons.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from app.crm.actions import CONFIRM_MESSAGE, row_action_for
from app.crm.formatting import BLANK, date_part, display_value
from app.crm.query import QueryDescriptor, build_list_query
from app.crm.store import DataLoader, ReadState

if TYPE_CHECKING:
    from app.crm.actions import ActionDispatcher
    from app.crm.client import CRMClient
    from app.crm.schema import EntitySchema
    from app.crm.store import RecordStore

LOADING = "loading"
FAILURE = "failure"
TABLE = "table"

DATE_FIELDS = ("createdon",)

# (client, store) -> object with load(query); DataLoader in production
LoaderFactory = Callable[["CRMClient", "RecordStore"], Any]


@dataclass(frozen=True)
class RowAction:
    kind: str
    label: str
    css: str
    record_id: str
    href: str | None = None
    confirm: str | None = None


@dataclass
class Row:
    record_id: str
    record: dict[str, Any]
    cells: list[Any]
    actions: list[RowAction] = field(default_factory=list)


@dataclass
class ListContent:
    kind: str
    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    can_create: bool = False


class CRMView:
    def __init__(self, schema: "EntitySchema", store: "RecordStore", loader: LoaderFactory = DataLoader):
        self.schema = schema
        self.store = store
        self.loader = loader
        self.row_action = row_action_for(schema)

    def mount(self, client: "CRMClient") -> None:
        if self.needs_to_load():
            self.load_from_crm(client)

    def needs_to_load(self) -> bool:
        return self.store.state is ReadState.DEFAULT

    def load_from_crm(self, client: "CRMClient") -> None:
        self.loader(client, self.store).load(self.generate_query())

    def generate_query(self) -> QueryDescriptor:
        return build_list_query(self.schema, self.schema.field_names())

    def get_content(self) -> ListContent:
        state = self.store.state
        if state is ReadState.STARTED:
            return self.get_started_content()
        if state is ReadState.SUCCESS:
            return self.get_success_content()
        if state is ReadState.FAILURE:
            return self.get_failure_content()
        # DEFAULT: nothing loaded yet, show the spinner
        return self.get_started_content()

    def get_started_content(self) -> ListContent:
        return ListContent(kind=LOADING)

    def get_failure_content(self) -> ListContent:
        return ListContent(kind=FAILURE)

    def get_success_content(self) -> ListContent:
        return ListContent(
            kind=TABLE,
            columns=[c.label for c in self.schema.columns],
            rows=[self.to_row(r) for r in self.store.records],
            can_create=bool(self.schema.create_fields),
        )

    def to_row(self, record: dict[str, Any]) -> Row:
        self.cleanup(record)
        record_id = str(record.get(self.schema.id_field) or "").strip()
        cells = [record.get(c.field, BLANK) for c in self.schema.columns]
        return Row(record_id=record_id, record=record, cells=cells, actions=self.add_inputs(record_id))

    def cleanup(self, record: dict[str, Any]) -> None:
        self.apply_option_set_mappings(record)
        self.cleanup_null_field_values(record)

    def apply_option_set_mappings(self, record: dict[str, Any]) -> None:
        for mapping in self.schema.option_sets:
            mapped_field = mapping.get_field()
            record[mapped_field] = mapping.map(record.get(mapped_field))

    def cleanup_null_field_values(self, record: dict[str, Any]) -> None:
        for key in list(record):
            record[key] = display_value(record[key])
            if key in DATE_FIELDS:
                record[key] = date_part(record[key])

    def add_inputs(self, record_id: str) -> list[RowAction]:
        actions: list[RowAction] = []
        if self.schema.has_detail:
            actions.append(
                RowAction(
                    kind="view",
                    label="Detailed Info",
                    css="btn btn-sm btn-primary",
                    record_id=record_id,
                    href=self.handle_view(record_id),
                )
            )
        actions.append(
            RowAction(
                kind=self.row_action.kind,
                label=self.row_action.label,
                css=self.row_action.css,
                record_id=record_id,
                confirm=CONFIRM_MESSAGE,
            )
        )
        return actions

    def handle_view(self, record_id: str) -> str:
        return self.schema.detail_href(record_id)

    def handle_delete(self, dispatcher: "ActionDispatcher", record_id: str, confirm: Callable[[str], bool]) -> bool:
        return self.row_action.invoke(dispatcher, self.schema.entity_type, record_id, confirm)
