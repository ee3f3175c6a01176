"""
Option-set mappings: the CRM stores enumerated fields as integer codes
(876570000, 876570001, ...). These tables turn codes into display labels
before a record reaches a list view.

Codes without a label are left as they are. There is no "Unknown" fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class OptionSetMapping:
    field: str
    labels: Mapping[int, str] = field(default_factory=dict)

    def get_field(self) -> str:
        return self.field

    def map(self, value: Any) -> Any:
        code = as_code(value)
        if code is None:
            return value
        return self.labels.get(code, value)


def as_code(value: Any) -> int | None:
    # OData returns option-set values as ints; form posts and exports sometimes
    # hand us the same code as a string.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


APPLICATION_TYPE_VEHICLE_REGISTRATION = 876570000
APPLICATION_TYPE_ADDRESS_CHANGE = 876570001

APPLICATION_TYPE = OptionSetMapping(
    "madmv_applicationtype",
    {
        APPLICATION_TYPE_VEHICLE_REGISTRATION: "Vehicle Registration",
        APPLICATION_TYPE_ADDRESS_CHANGE: "Address Change",
    },
)

APPLICATION_STATUS = OptionSetMapping(
    "statuscode",
    {
        1: "Active",
        2: "Inactive",
        876570000: "Submitted",
        876570001: "Approved",
        876570002: "Rejected",
    },
)

PLATE_TYPE = OptionSetMapping(
    "madmv_platetype",
    {
        876570000: "Passenger",
        876570001: "Commercial",
        876570002: "Motorcycle",
        876570003: "Vanity",
    },
)
