import json
from datetime import datetime, timezone

import httpx
import pytest

from transport_billing.db.storage import MemoryStore
from transport_billing.services.container import build_services

BACKEND_URL = "http://backend.test"

# 2024-06-15 12:00:00 UTC
START = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc).timestamp()


class FakeClock:
    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, minutes: float = 0, days: float = 0):
        self.now += minutes * 60 + days * 86400


class FakeBackend:
    """
    Routes (method, path) to canned JSON responses and records every
    request it sees.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, body=None, status=200, raises=None, raw=None):
        self.routes[(method, path)] = (status, body, raises, raw)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Route not found"})
        status, body, raises, raw = route
        if raises is not None:
            raise raises
        if raw is not None:
            return httpx.Response(status, content=raw)
        return httpx.Response(status, json=body)

    @property
    def transport(self):
        return httpx.MockTransport(self.handle)


def user_payload(**overrides):
    payload = {
        "id": "u1",
        "uniqueid": "TB-0001",
        "email": "owner@example.com",
        "profile": {
            "ownerName": "Ravi Kumar",
            "companyName": "Kumar Roadways",
            "mobileNumber": "9876543210",
            "address": "12 Transport Nagar, Pune",
            "gstNumber": "27AABCU9603R1ZM",
            "panNumber": "AABCU9603R",
        },
        "bank": {
            "bankName": "SBI",
            "accountHolderName": "Kumar Roadways",
            "accountNumber": "123456789012",
            "ifscCode": "SBIN0001234",
        },
        "role": "user",
        "isActive": True,
    }
    payload.update(overrides)
    return payload


def auth_payload(token="tok-1", **overrides):
    payload = user_payload(**overrides)
    payload["token"] = token
    return {"success": True, "data": payload}


def bill_payload(
    entry_id="TE-20240601-0001",
    storage_id=None,
    date="2024-06-01T00:00:00.000Z",
    total=100,
    status="PENDING",
    vehicle="MH12AB1234",
    origin="Pune",
    destination="Mumbai",
    owner="Shree Logistics\nPlot 4, MIDC",
    driver="Suresh - 9822000000",
    invoice="INV-1",
):
    return {
        "id": entry_id,
        "_id": storage_id or f"db-{entry_id}",
        "date": date,
        "vehicleNo": vehicle,
        "from": origin,
        "to": destination,
        "transportBillData": {
            "bill": 1,
            "ms": "M/s Acme",
            "gstno": "",
            "otherDetail": "",
            "srno": 1,
            "lrno": 10,
            "lrDate": date,
            "invoiceNo": invoice,
            "consignorConsignee": "Acme / Beta",
            "handleCharges": 0,
            "detention": 0,
            "freight": total,
            "total": total,
            "status": status,
        },
        "ownerData": {
            "contactNo": 9822000000,
            "ownerNameAndAddress": owner,
            "panNo": "",
            "driverNameAndMob": driver,
            "licenceNo": "",
            "chasisNo": "",
            "engineNo": "",
            "insuranceCo": "",
            "policyNo": "",
            "policyDate": date,
            "srno": 1,
            "lrno": 10,
            "packages": 5,
            "description": "Steel",
            "wtKgs": 1000,
            "remarks": "",
            "brokerName": "",
            "brokerPanNo": "",
            "lorryHireAmount": 80,
            "accNo": None,
            "otherChargesHamliDetentionHeight": 0,
            "totalLorryHireRs": 80,
            "advAmt1": 10,
            "advDate1": date,
            "neftImpsIdno1": "",
            "advAmt2": 0,
            "advDate2": None,
            "neftImpsIdno2": "",
            "advAmt3": 0,
            "advDate3": None,
            "neftImpsIdno3": "",
            "balanceAmt": 70,
            "otherChargesHamaliDetentionHeight": "",
            "deductionInClaimPenalty": "",
            "finalNeftImpsIdno": "",
            "finalDate": date,
            "deliveryDate": date,
        },
        "createdAt": "2024-06-01T10:30:00.000Z",
        "updatedAt": "2024-06-01T10:30:00.000Z",
    }


def entries_payload(bills):
    return {"success": True, "data": {"entries": bills, "total": len(bills), "page": 1, "pages": 1}}


def stored_user(store, clock, minutes_old=0):
    """Seeds a token and a cached user snapshot ``minutes_old`` minutes old."""
    store.set("auth_token", "tok-cached")
    user = user_payload()
    user.pop("bank")
    store.set("user_data", json.dumps(user))
    store.set("user_data_timestamp", str(int((clock() - minutes_old * 60) * 1000)))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def services(store, backend, clock):
    return build_services(store, transport=backend.transport, clock=clock, base_url=BACKEND_URL)
