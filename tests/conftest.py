import pytest

from app.crm.client import CRMError
from app.crm.query import QueryDescriptor


class FakeCRMClient:
    """Stands in for CRMClient: canned rows per entity set, records every call."""

    def __init__(self, rows=None, records=None, fail_reads=False, fail_writes=False):
        self.rows = rows or {}
        self.records = records or {}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.calls = []

    def _read(self, query: QueryDescriptor):
        if not query.valid:
            raise CRMError("empty query")
        self.calls.append(("GET", query.to_path()))
        if self.fail_reads:
            raise CRMError("HTTP 500 from CRM", status=500)

    def list_records(self, query):
        self._read(query)
        return [dict(r) for r in self.rows.get(query.entity_set, [])]

    def get_record(self, query):
        self._read(query)
        return dict(self.records.get((query.entity_set, query.record_id), {}))

    def _write(self, *call):
        self.calls.append(call)
        if self.fail_writes:
            raise CRMError("HTTP 400 from CRM", status=400)
        return {}

    def create_record(self, entity_set, payload):
        return self._write("POST", entity_set, payload)

    def update_record(self, entity_set, record_id, payload):
        return self._write("PATCH", entity_set, record_id, payload)

    def delete_record(self, entity_set, record_id):
        return self._write("DELETE", entity_set, record_id)

    def invoke_action(self, entity_set, record_id, action):
        return self._write("ACTION", entity_set, record_id, action)

    def writes(self):
        return [c for c in self.calls if c[0] != "GET"]


CUSTOMER_ROWS = [
    {
        "madmv_ma_customerid": "c-1",
        "madmv_fullname": "John Michael",
        "madmv_age": 41,
        "madmv_cssn": "123-45-6789",
        "madmv_email": "john@example.com",
        "madmv_phonenumber": None,
    },
    {
        "madmv_ma_customerid": "c-2",
        "madmv_fullname": "Ann O'brien",
        "madmv_age": 35,
        "madmv_cssn": "987-65-4321",
        "madmv_email": "ann@example.com",
        "madmv_phonenumber": "555-0100",
    },
]

APPLICATION_RECORD = {
    "@odata.context": "https://crm.example.com/api/data/v9.1/$metadata#madmv_ma_applications/$entity",
    "madmv_ma_applicationid": "a-1",
    "madmv_applicationsubject": "Register truck",
    "madmv_applicationtype": 876570000,
    "madmv_fee": 45,
    "madmv_ssn": "123-45-6789",
    "madmv_vehicledetails": "FORD F150",
    "madmv_insurancecompany": "Acme Mutual",
    "madmv_platetype": None,
    "madmv_newcity": None,
    "madmv_OwnerInfo": {"madmv_fullname": "John Michael", "madmv_ma_customerid": "c-1"},
}


@pytest.fixture()
def fake_crm():
    return FakeCRMClient(
        rows={"madmv_ma_customers": CUSTOMER_ROWS},
        records={("madmv_ma_applications", "a-1"): APPLICATION_RECORD},
    )


@pytest.fixture()
def app(fake_crm, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("CRM_BASE_URL", "https://crm.example.com")
    for k in ("CRM_TENANT_ID", "CRM_CLIENT_ID", "CRM_CLIENT_SECRET", "CRM_ACCESS_TOKEN"):
        monkeypatch.delenv(k, raising=False)

    from app.crm import create_app

    app = create_app(crm_client=fake_crm)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def csrf(client) -> str:
    client.get("/")
    with client.session_transaction() as sess:
        return sess["csrf_token"]
