import pickle
from dataclasses import replace

import pytest

from conftest import NOW, at, booking
from rentacar.exceptions import InvalidPageRequestError, ReservationNotFoundError
from rentacar.models.reservation import Reservation
from rentacar.models.store import Store
from rentacar.services.query_service import ReservationQueryService
from rentacar.services.reservation_service import ReservationService
from rentacar.utils.constants import ReservationStatus


def seed(store, customer, admin, car):
    """Five bookings for the customer on consecutive hours, one for the admin."""
    out = []
    for h in range(9, 14):
        out.append(ReservationService.create_reservation(
            booking(at(h), at(h, 30)), customer, car, store=store, now=NOW))
    out.append(ReservationService.create_reservation(
        booking(at(10, day=3), at(11, day=3)), admin, car, store=store, now=NOW))
    return out


def test_paged_listing_sorts_and_slices(store, customer, admin, car):
    seed(store, customer, admin, car)

    first = store.list_all_paged(0, 4, "pick_up_time", "ASC")
    second = store.list_all_paged(1, 4, "pick_up_time", "ASC")

    assert first.total_elements == 6
    assert first.total_pages == 2
    assert [r.pick_up_time.hour for r in first.content] == [9, 10, 11, 12]
    assert [r.pick_up_time for r in second.content] == [at(13), at(10, day=3)]


def test_default_direction_is_descending(store, customer, admin, car):
    seed(store, customer, admin, car)
    page = store.list_all_paged(0, 2, "pick_up_time")
    assert page.content[0].pick_up_time == at(10, day=3)


def test_user_listing_only_shows_own(store, customer, admin, car):
    seed(store, customer, admin, car)

    page = ReservationQueryService.reservation_page_for_user(admin.user_id, 0, 10, store=store)

    assert page.total_elements == 1
    dto = page.content[0]
    assert dto["user_id"] == admin.user_id
    assert dto["pick_up_time"] == "01/03/2030 10:00:00"
    assert dto["car"]["brand"] == "Toyota"


@pytest.mark.parametrize("args", [
    (0, 10, "colour", "ASC"),
    (0, 10, "id", "SIDEWAYS"),
    (0, 0, "id", "ASC"),
    (-1, 10, "id", "ASC"),
])
def test_bad_page_requests(store, args):
    with pytest.raises(InvalidPageRequestError):
        store.list_all_paged(*args)


def test_get_for_user_hides_foreign_reservations(store, customer, admin, car):
    mine = seed(store, customer, admin, car)[0]

    assert ReservationQueryService.get_reservation_for_user(mine.id, customer.user_id, store=store)["id"] == mine.id
    with pytest.raises(ReservationNotFoundError):
        ReservationQueryService.get_reservation_for_user(mine.id, admin.user_id, store=store)
    with pytest.raises(ReservationNotFoundError):
        ReservationQueryService.get_reservation("missing", store=store)


def test_conflict_query_respects_excluded_statuses(store, customer, admin, car):
    rs = seed(store, customer, admin, car)
    store.update(replace(rs[1], status=ReservationStatus.DONE))

    found = store.find_conflicting(car.car_id, at(9, 15), at(10, 15), {ReservationStatus.CANCELED})
    assert len(found) == 2
    found = store.find_conflicting(car.car_id, at(9, 15), at(10, 15), ReservationStatus.TERMINAL)
    assert [r.id for r in found] == [rs[0].id]


def test_update_moves_index_entry(store, customer, car):
    rid = store.insert(Reservation(car.car_id, customer.user_id, at(9), at(10), "A", "B"))
    store.update(replace(store.get_by_id(rid), pick_up_time=at(15), drop_off_time=at(16)))

    assert store.find_conflicting(car.car_id, at(9), at(10), ()) == []
    assert len(store.find_conflicting(car.car_id, at(15), at(15, 30), ())) == 1


def test_update_of_missing_id_reports_false(store, customer, car):
    ghost = Reservation(car.car_id, customer.user_id, at(9), at(10), "A", "B", id="ghost")
    assert store.update(ghost) is False


def test_pickle_file_roundtrip(tmp_path):
    path = tmp_path / "data.pkl"
    st = Store(path)
    cid = st.create_car({"brand": "Mazda", "model": "3", "price_per_hour": 9})
    uid = st.create_user("bob", "customer")
    rid = st.insert(Reservation(cid, uid, at(9), at(10), "A", "B", total_price=9.0))

    reloaded = Store(path)

    assert reloaded.get_car(cid).price_per_hour == 9
    assert reloaded.get_by_id(rid).total_price == 9.0
    # index rebuilt on load
    assert len(reloaded.find_conflicting(cid, at(10), at(11), ())) == 1


def test_incompatible_file_is_backed_up(tmp_path):
    path = tmp_path / "data.pkl"
    with open(path, "wb") as f:
        pickle.dump(["not", "a", "store"], f)

    st = Store(path)

    assert not st.reservations
    assert (tmp_path / "data.pkl.bak").exists()


def test_default_listing_is_newest_first(store, customer, admin, car):
    rs = seed(store, customer, admin, car)
    # amending an old booking keeps its place
    store.update(replace(rs[0], pick_up_location="Pier"))

    page = store.list_all_paged(0, 3)

    assert [r.id for r in page.content] == [rs[5].id, rs[4].id, rs[3].id]
    assert ReservationQueryService.reservation_page(0, 10, store=store).content[-1]["id"] == rs[0].id


def test_sequence_survives_reload(tmp_path):
    path = tmp_path / "data.pkl"
    st = Store(path)
    cid = st.create_car({"price_per_hour": 9})
    first = st.insert(Reservation(cid, "u1", at(9), at(10), "A", "B"))

    reloaded = Store(path)
    second = reloaded.insert(Reservation(cid, "u1", at(11), at(12), "A", "B"))

    assert reloaded.get_by_id(second).seq > reloaded.get_by_id(first).seq


def test_explicit_none_path_keeps_app_store_in_memory(tmp_path, monkeypatch):
    from rentacar import create_app
    from rentacar.config import TestConfig
    from rentacar.models import store as store_mod

    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setattr(store_mod, "DEFAULT_DATA_PATH", str(tmp_path / "data.pkl"))
    monkeypatch.setattr(Store, "_inst", None)
    monkeypatch.setattr(Store, "_atexit_registered", True)

    create_app(TestConfig)
    st = Store.instance()
    st.create_car({"price_per_hour": 5})

    assert st.path is None
    assert not (tmp_path / "data.pkl").exists()
