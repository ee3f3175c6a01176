"""
Applications and their history.

An application is either a vehicle registration or an address change; the
detail form shows a different block of fields for each. History rows
(applicationhist) are never deleted. The only row action is Undo, which calls
the bound CRM action that restores the application.
"""

from __future__ import annotations

from typing import Any

from app.crm.option_sets import (
    APPLICATION_STATUS,
    APPLICATION_TYPE,
    APPLICATION_TYPE_VEHICLE_REGISTRATION,
    as_code,
)
from app.crm.query import Expand
from app.crm.schema import Column, CreateField, DetailField, EntitySchema, FlattenedField

COMMON_FIELDS = (
    DetailField("Application Subject", "madmv_applicationsubject"),
    DetailField("Application Type", "madmv_applicationtype", readonly=True),
    DetailField("Owner", "madmv_ownerinfo", readonly=True),
    DetailField("Fee", "madmv_fee"),
    DetailField("SSN", "madmv_ssn"),
)

VEHICLE_REGISTRATION_FIELDS = (
    DetailField("Vehicle", "madmv_vehicledetails"),
    DetailField("Insurance Company", "madmv_insurancecompany"),
    DetailField("Plate Type", "madmv_platetype"),
    DetailField("Registration Period", "madmv_registrationperiod"),
    DetailField("Registration Type", "madmv_registrationtype"),
    DetailField("Reissued Plates", "madmv_reissuedplates"),
)

ADDRESS_CHANGE_FIELDS = (
    DetailField("Reason For Address Change", "madmv_reasonforaddresschange"),
    DetailField("New Street 1", "madmv_newstreet1"),
    DetailField("New Street 2", "madmv_newstreet2"),
    DetailField("New City", "madmv_newcity"),
    DetailField("New State", "madmv_newstate"),
    DetailField("New Zip", "madmv_newzip"),
    DetailField("New Country", "madmv_newcountry"),
)

OTHER_FIELDS = (DetailField("Describe Other", "madmv_describeother"),)


def application_layout(record: dict[str, Any]) -> tuple[DetailField, ...]:
    if as_code(record.get("madmv_applicationtype")) == APPLICATION_TYPE_VEHICLE_REGISTRATION:
        return COMMON_FIELDS + VEHICLE_REGISTRATION_FIELDS + OTHER_FIELDS
    return COMMON_FIELDS + ADDRESS_CHANGE_FIELDS + OTHER_FIELDS


APPLICATION_TYPE_OPTIONS = tuple((str(code), label) for code, label in APPLICATION_TYPE.labels.items())

APPLICATION = EntitySchema(
    entity_type="application",
    title="Applications",
    entity_set="madmv_ma_applications",
    id_field="madmv_ma_applicationid",
    columns=(
        Column("Subject", "madmv_applicationsubject"),
        Column("Type", "madmv_applicationtype"),
        Column("SSN", "madmv_ssn"),
        Column("Fee", "madmv_fee"),
        Column("Status", "statuscode"),
        Column("Created On", "createdon"),
    ),
    option_sets=(APPLICATION_TYPE, APPLICATION_STATUS),
    detail_fields=COMMON_FIELDS + VEHICLE_REGISTRATION_FIELDS + ADDRESS_CHANGE_FIELDS + OTHER_FIELDS,
    detail_expand=Expand("madmv_OwnerInfo", ("madmv_fullname",)),
    flattened=(FlattenedField("madmv_ownerinfo", "madmv_OwnerInfo", "madmv_fullname"),),
    detail_layout=application_layout,
    create_fields=(
        CreateField("subject", "Application Subject", "madmv_applicationsubject", placeholder="Enter subject.."),
        CreateField(
            "applicationtype",
            "Application Type",
            "madmv_applicationtype",
            "option",
            input_type="select",
            options=APPLICATION_TYPE_OPTIONS,
        ),
        CreateField("ssn", "Social Security Number", "madmv_ssn", placeholder="Enter Social Security Number"),
        CreateField("vehicledetails", "Vehicle", "madmv_vehicledetails", "upper", placeholder="Enter vehicle details.."),
        CreateField("newstreet1", "New Street 1", "madmv_newstreet1", "upper", placeholder="Enter line 1 of new address.."),
        CreateField("newstreet2", "New Street 2", "madmv_newstreet2", "upper", placeholder="Enter line 2 of new address.."),
        CreateField("newcity", "New City", "madmv_newcity", "upper", placeholder="Enter new city.."),
        CreateField("newstate", "New State", "madmv_newstate", "upper", placeholder="Enter state abbreviation..", max_length=2),
        CreateField("newzip", "New Zip", "madmv_newzip", placeholder="Enter zip code.."),
    ),
)

APPLICATION_HISTORY = EntitySchema(
    entity_type="applicationhist",
    title="Application History",
    entity_set="madmv_ma_applicationhists",
    id_field="madmv_ma_applicationhistid",
    columns=(
        Column("Subject", "madmv_applicationsubject"),
        Column("Type", "madmv_applicationtype"),
        Column("SSN", "madmv_ssn"),
        Column("Created On", "createdon"),
    ),
    option_sets=(APPLICATION_TYPE,),
    row_action="undo",
    has_detail=False,
    undo_action="madmv_UndoApplication",
    related_types=("application",),
)
