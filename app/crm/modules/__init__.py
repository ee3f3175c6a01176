from __future__ import annotations

from app.crm.modules.applications.schema import APPLICATION, APPLICATION_HISTORY
from app.crm.modules.customers.schema import CUSTOMER
from app.crm.modules.vehicles.schema import VEHICLE
from app.crm.schema import SchemaRegistry

ENTITY_SCHEMAS = (CUSTOMER, APPLICATION, VEHICLE, APPLICATION_HISTORY)


def default_schemas() -> SchemaRegistry:
    return SchemaRegistry(ENTITY_SCHEMAS)
