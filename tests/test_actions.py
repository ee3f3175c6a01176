"""Tests for the write-action dispatcher."""

import pytest

from app.crm.actions import ROW_ACTIONS, ActionDispatcher, row_action_for
from app.crm.modules import default_schemas
from app.crm.modules.applications.schema import APPLICATION_HISTORY
from app.crm.modules.customers.schema import CUSTOMER
from app.crm.schema import UnknownEntityType
from app.crm.store import ReadState, StoreRegistry

from conftest import FakeCRMClient


@pytest.fixture()
def stores():
    schemas = default_schemas()
    reg = StoreRegistry.for_types(schemas.types())
    for t in schemas.types():
        reg[t].begin()
        reg[t].succeed([])
    return reg


def _dispatcher(crm, stores):
    return ActionDispatcher(crm, default_schemas(), stores)


def test_update_strips_primary_key(stores):
    crm = FakeCRMClient()
    _dispatcher(crm, stores).update("customer", "c-1", {"madmv_ma_customerid": "c-1", "madmv_email": "a@b.c"})
    assert crm.writes() == [("PATCH", "madmv_ma_customers", "c-1", {"madmv_email": "a@b.c"})]
    assert stores["customer"].state is ReadState.DEFAULT
    assert stores["vehicle"].state is ReadState.SUCCESS


def test_failed_write_keeps_store(stores):
    crm = FakeCRMClient(fail_writes=True)
    assert _dispatcher(crm, stores).delete("customer", "c-1") is False
    assert stores["customer"].state is ReadState.SUCCESS


def test_undo_resets_history_and_applications(stores):
    crm = FakeCRMClient()
    assert _dispatcher(crm, stores).undo("applicationhist", "h-1") is True
    assert stores["applicationhist"].state is ReadState.DEFAULT
    assert stores["application"].state is ReadState.DEFAULT
    assert stores["customer"].state is ReadState.SUCCESS


def test_undo_without_action_configured(stores):
    crm = FakeCRMClient()
    assert _dispatcher(crm, stores).undo("customer", "c-1") is False
    assert crm.writes() == []


def test_unknown_entity_type(stores):
    with pytest.raises(UnknownEntityType):
        _dispatcher(FakeCRMClient(), stores).delete("widget", "w-1")


def test_row_action_lookup():
    assert row_action_for(CUSTOMER) is ROW_ACTIONS["delete"]
    assert row_action_for(APPLICATION_HISTORY) is ROW_ACTIONS["undo"]
