"""
Tests for the generic list view: state dispatch, row cleanup, action columns.
"""

from app.crm.actions import ActionDispatcher
from app.crm.modules import default_schemas
from app.crm.modules.applications.schema import APPLICATION, APPLICATION_HISTORY
from app.crm.modules.customers.schema import CUSTOMER
from app.crm.option_sets import APPLICATION_TYPE, OptionSetMapping
from app.crm.store import ReadState, RecordStore, StoreRegistry
from app.crm.views import CRMView
from app.crm.views.list_view import FAILURE, LOADING, TABLE

from conftest import CUSTOMER_ROWS, FakeCRMClient


def _loaded_view(schema, rows):
    store = RecordStore(schema.entity_type)
    store.begin()
    store.succeed(rows)
    return CRMView(schema, store)


class TestDispatch:
    def test_default_renders_loading(self):
        view = CRMView(CUSTOMER, RecordStore("customer"))
        assert view.get_content().kind == LOADING

    def test_started_renders_loading(self):
        store = RecordStore("customer")
        store.begin()
        assert CRMView(CUSTOMER, store).get_content().kind == LOADING

    def test_failure_renders_banner(self):
        store = RecordStore("customer")
        store.begin()
        store.fail("nope")
        content = CRMView(CUSTOMER, store).get_content()
        assert content.kind == FAILURE
        assert content.rows == []

    def test_success_renders_table(self):
        content = _loaded_view(CUSTOMER, CUSTOMER_ROWS).get_content()
        assert content.kind == TABLE
        assert content.columns == ["Name", "Age", "SSN", "Email", "Phone"]
        assert content.can_create is True


class TestMount:
    def test_mount_loads_only_from_default(self):
        crm = FakeCRMClient(rows={"madmv_ma_customers": CUSTOMER_ROWS})
        store = RecordStore("customer")
        view = CRMView(CUSTOMER, store)
        view.mount(crm)
        view.mount(crm)
        assert store.state is ReadState.SUCCESS
        assert len(crm.calls) == 1
        assert crm.calls[0][1].startswith("madmv_ma_customers?$select=madmv_ma_customerid,")

    def test_mount_failure(self):
        store = RecordStore("customer")
        view = CRMView(CUSTOMER, store)
        view.mount(FakeCRMClient(fail_reads=True))
        assert view.get_content().kind == FAILURE

    def test_mount_uses_injected_loader(self):
        built = []

        class RecordingLoader:
            def __init__(self, client, store):
                built.append((client, store))

            def load(self, query):
                built.append(query.to_path())
                return True

        crm = FakeCRMClient()
        store = RecordStore("customer")
        CRMView(CUSTOMER, store, loader=RecordingLoader).mount(crm)
        assert built[0] == (crm, store)
        assert built[1].startswith("madmv_ma_customers?$select=madmv_ma_customerid,")
        assert crm.calls == []


class TestRows:
    def test_customer_rows_end_to_end(self):
        content = _loaded_view(CUSTOMER, CUSTOMER_ROWS).get_content()
        assert len(content.rows) == 2
        first = content.rows[0]
        assert first.record_id == "c-1"
        assert first.cells == ["John Michael", 41, "123-45-6789", "john@example.com", " "]
        labels = [a.label for a in first.actions]
        assert labels == ["Detailed Info", "Delete"]
        assert first.actions[0].href == "/#/customerDetails/c-1"
        assert first.actions[1].confirm

    def test_null_becomes_single_space(self):
        row = _loaded_view(CUSTOMER, [{"madmv_ma_customerid": "c-9", "madmv_email": None}]).get_content().rows[0]
        assert row.record["madmv_email"] == " "

    def test_missing_column_renders_blank(self):
        row = _loaded_view(CUSTOMER, [{"madmv_ma_customerid": "c-9"}]).get_content().rows[0]
        assert row.cells == [" "] * 5

    def test_createdon_truncated_and_option_set_mapped(self):
        rows = [
            {
                "madmv_ma_applicationid": "a-1",
                "madmv_applicationtype": 876570001,
                "statuscode": 1,
                "createdon": "2024-05-01T10:00:00Z",
                "madmv_fee": None,
            }
        ]
        row = _loaded_view(APPLICATION, rows).get_content().rows[0]
        assert row.record["createdon"] == "2024-05-01"
        assert row.record["madmv_applicationtype"] == "Address Change"
        assert row.record["statuscode"] == "Active"
        assert row.record["madmv_fee"] == " "

    def test_unmapped_code_passes_through(self):
        rows = [{"madmv_ma_applicationid": "a-1", "madmv_applicationtype": 123}]
        row = _loaded_view(APPLICATION, rows).get_content().rows[0]
        assert row.record["madmv_applicationtype"] == 123

    def test_store_records_not_mutated(self):
        view = _loaded_view(CUSTOMER, CUSTOMER_ROWS)
        view.get_content()
        assert view.store.records[0]["madmv_phonenumber"] is None

    def test_history_rows_only_offer_undo(self):
        rows = [{"madmv_ma_applicationhistid": "h-1", "createdon": "2023-01-02T00:00:00Z"}]
        content = _loaded_view(APPLICATION_HISTORY, rows).get_content()
        assert [a.kind for a in content.rows[0].actions] == ["undo"]
        assert content.rows[0].actions[0].label == "Undo"
        assert content.can_create is False

    def test_option_set_mapping_api(self):
        m = OptionSetMapping("x", {1: "One"})
        assert m.get_field() == "x"
        assert m.map(1) == "One"
        assert m.map("1") == "One"
        assert m.map(2) == 2
        assert m.map(None) is None
        assert APPLICATION_TYPE.map(True) is True


class TestRowActions:
    def _dispatcher(self, crm):
        schemas = default_schemas()
        return ActionDispatcher(crm, schemas, StoreRegistry.for_types(schemas.types()))

    def test_declined_confirmation_dispatches_nothing(self):
        crm = FakeCRMClient()
        view = CRMView(CUSTOMER, RecordStore("customer"))
        assert view.handle_delete(self._dispatcher(crm), "c-1", confirm=lambda _m: False) is False
        assert crm.writes() == []

    def test_confirmed_delete(self):
        crm = FakeCRMClient()
        asked = []
        view = CRMView(CUSTOMER, RecordStore("customer"))

        def confirm(message):
            asked.append(message)
            return True

        assert view.handle_delete(self._dispatcher(crm), "c-1", confirm=confirm) is True
        assert asked == ["Are you sure you wish to delete this item?"]
        assert crm.writes() == [("DELETE", "madmv_ma_customers", "c-1")]

    def test_history_routes_to_undo(self):
        crm = FakeCRMClient()
        view = CRMView(APPLICATION_HISTORY, RecordStore("applicationhist"))
        view.handle_delete(self._dispatcher(crm), "h-1", confirm=lambda _m: True)
        assert crm.writes() == [("ACTION", "madmv_ma_applicationhists", "h-1", "madmv_UndoApplication")]
