import os
import pathlib
import sys
from datetime import datetime

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from rentacar.models.reservation import ReservationRequest
from rentacar.utils.constants import Role

# Fixed "now" for service-level tests; every window below lies after it
NOW = datetime(2030, 1, 1, 8, 0)


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    return datetime(2030, 1, day, hour, minute)


def booking(start: datetime, end: datetime, pick="Airport", drop="Downtown") -> ReservationRequest:
    return ReservationRequest(start, end, pick, drop)


@pytest.fixture
def store(monkeypatch):
    """
    A fresh in-memory store, patched in as the singleton and as
    common._store() so services and controllers all see the SAME object.
    """
    from rentacar.models.store import Store
    from rentacar.services import common as common_mod

    st = Store(None)
    monkeypatch.setattr(Store, "_inst", st, raising=True)
    monkeypatch.setattr(common_mod, "_store", lambda: st, raising=True)
    yield st


@pytest.fixture
def car(store):
    cid = store.create_car({"brand": "Toyota", "model": "Corolla", "price_per_hour": 10})
    return store.get_car(cid)


@pytest.fixture
def other_car(store):
    cid = store.create_car({"brand": "Honda", "model": "Civic", "price_per_hour": 15})
    return store.get_car(cid)


@pytest.fixture
def customer(store):
    return store.get_user(store.create_user("alice", Role.CUSTOMER))


@pytest.fixture
def admin(store):
    return store.get_user(store.create_user("root", Role.ADMIN))


@pytest.fixture
def client(store):
    """Flask test client bound to the patched store."""
    from rentacar import create_app
    from rentacar.config import TestConfig
    app = create_app(TestConfig)
    with app.test_client() as c:
        yield c


def login(client, user):
    """Stand-in for the external auth layer: write identity into the session."""
    with client.session_transaction() as sess:
        sess["uid"] = user.user_id
        sess["role"] = user.role
