from __future__ import annotations

from app.crm.option_sets import PLATE_TYPE
from app.crm.query import Expand
from app.crm.schema import Column, CreateField, DetailField, EntitySchema, FlattenedField

PLATE_TYPE_OPTIONS = tuple((str(code), label) for code, label in PLATE_TYPE.labels.items())

VEHICLE = EntitySchema(
    entity_type="vehicle",
    title="Vehicles",
    entity_set="madmv_ma_vehicles",
    id_field="madmv_ma_vehicleid",
    columns=(
        Column("VIN", "madmv_vin"),
        Column("Make", "madmv_make"),
        Column("Model", "madmv_model"),
        Column("Year", "madmv_year"),
        Column("Color", "madmv_color"),
        Column("Plate", "madmv_platenumber"),
        Column("Plate Type", "madmv_platetype"),
    ),
    option_sets=(PLATE_TYPE,),
    detail_fields=(
        DetailField("VIN", "madmv_vin"),
        DetailField("Make", "madmv_make"),
        DetailField("Model", "madmv_model"),
        DetailField("Year", "madmv_year"),
        DetailField("Color", "madmv_color"),
        DetailField("Plate", "madmv_platenumber"),
        DetailField("Plate Type", "madmv_platetype", readonly=True),
        DetailField("Owner", "madmv_owner", readonly=True),
    ),
    detail_expand=Expand("madmv_VehicleOwner", ("madmv_fullname",)),
    flattened=(FlattenedField("madmv_owner", "madmv_VehicleOwner", "madmv_fullname"),),
    create_fields=(
        CreateField("vin", "VIN", "madmv_vin", "upper", placeholder="Enter vehicle identification number.."),
        CreateField("make", "Make", "madmv_make", "capitalize", placeholder="Enter make.."),
        CreateField("model", "Model", "madmv_model", "capitalize", placeholder="Enter model.."),
        CreateField("year", "Year", "madmv_year", placeholder="Enter model year.."),
        CreateField("color", "Color", "madmv_color", "capitalize", placeholder="Enter color.."),
        CreateField("platenumber", "Plate", "madmv_platenumber", "upper", placeholder="Enter plate number.."),
        CreateField("platetype", "Plate Type", "madmv_platetype", "option", input_type="select", options=PLATE_TYPE_OPTIONS),
    ),
)
