from __future__ import annotations

from app.crm.schema import Column, CreateField, DetailField, EntitySchema

CUSTOMER = EntitySchema(
    entity_type="customer",
    title="Customers",
    entity_set="madmv_ma_customers",
    id_field="madmv_ma_customerid",
    columns=(
        Column("Name", "madmv_fullname"),
        Column("Age", "madmv_age"),
        Column("SSN", "madmv_cssn"),
        Column("Email", "madmv_email"),
        Column("Phone", "madmv_phonenumber"),
    ),
    detail_fields=(
        DetailField("Full Name", "madmv_fullname", readonly=True),
        DetailField("First Name", "madmv_firstname"),
        DetailField("Last Name", "madmv_lastname"),
        DetailField("Birthdate", "madmv_dateofbirth"),
        DetailField("Age", "madmv_age", readonly=True),
        DetailField("SSN", "madmv_cssn"),
        DetailField("Email", "madmv_email"),
        DetailField("Phone", "madmv_phonenumber"),
        DetailField("Street 1", "madmv_street1"),
        DetailField("Street 2", "madmv_street2"),
        DetailField("City", "madmv_city"),
        DetailField("State", "madmv_state"),
        DetailField("Zip Code", "madmv_zipcode"),
    ),
    create_fields=(
        CreateField("firstname", "First Name", "madmv_firstname", "capitalize", placeholder="Enter first name.."),
        CreateField("lastname", "Last Name", "madmv_lastname", "capitalize", placeholder="Enter last name.."),
        CreateField("bday", "Birthdate", "madmv_dateofbirth", input_type="date"),
        CreateField("ssn", "Social Security Number", "madmv_cssn", placeholder="Enter Social Security Number"),
        CreateField("email", "Email", "madmv_email", "lower", input_type="email", placeholder="Enter email address.."),
        CreateField("street1", "Street 1", "madmv_street1", "upper", placeholder="Enter line 1 of street address.."),
        CreateField("street2", "Street 2", "madmv_street2", "upper", placeholder="Enter line 2 of street address.."),
        CreateField("city", "City", "madmv_city", "upper", placeholder="Enter city of residence.."),
        CreateField("state", "State", "madmv_state", "upper", placeholder="Enter state abbreviation..", max_length=2),
        CreateField("zip", "Zip Code", "madmv_zipcode", placeholder="Enter zip code.."),
    ),
)
