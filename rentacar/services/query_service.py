from __future__ import annotations

from typing import Optional

from rentacar.exceptions import ReservationNotFoundError
from rentacar.models.page import Page
from rentacar.models.reservation import Reservation
from rentacar.models.store import Store
from rentacar.services import common
from rentacar.utils.constants import SortDirection


class ReservationQueryService:
    """Read-only reservation listings shaped as plain dicts for the API."""

    @staticmethod
    def to_dto(r: Reservation, store: Optional[Store] = None) -> dict:
        """Flatten a reservation and attach a short summary of its car."""
        st = store or common._store()
        car = st.get_car(r.car_id)
        return {
            "id": r.id,
            "car": {
                "id": r.car_id,
                "brand": car.brand if car else "",
                "model": car.model if car else "",
                "price_per_hour": car.price_per_hour if car else None,
            },
            "user_id": r.user_id,
            "pick_up_time": common.fmt_datetime(r.pick_up_time),
            "drop_off_time": common.fmt_datetime(r.drop_off_time),
            "pick_up_location": r.pick_up_location,
            "drop_off_location": r.drop_off_location,
            "status": r.status,
            "total_price": r.total_price,
        }

    @staticmethod
    def all_reservations(store: Optional[Store] = None) -> list[dict]:
        st = store or common._store()
        return [ReservationQueryService.to_dto(r, st) for r in st.list_all()]

    @staticmethod
    def reservation_page(page: int, size: int, sort: str = "seq",
                         direction: str = SortDirection.DESC,
                         store: Optional[Store] = None) -> Page:
        st = store or common._store()
        return st.list_all_paged(page, size, sort, direction).map(
            lambda r: ReservationQueryService.to_dto(r, st))

    @staticmethod
    def reservation_page_for_user(user_id: str, page: int, size: int, sort: str = "seq",
                                  direction: str = SortDirection.DESC,
                                  store: Optional[Store] = None) -> Page:
        st = store or common._store()
        return st.list_all_paged_for_user(user_id, page, size, sort, direction).map(
            lambda r: ReservationQueryService.to_dto(r, st))

    @staticmethod
    def get_reservation(reservation_id: str, store: Optional[Store] = None) -> dict:
        st = store or common._store()
        r = st.get_by_id(reservation_id)
        if r is None:
            raise ReservationNotFoundError(f"Error: reservation with ID '{reservation_id}' not found")
        return ReservationQueryService.to_dto(r, st)

    @staticmethod
    def get_reservation_for_user(reservation_id: str, user_id: str,
                                 store: Optional[Store] = None) -> dict:
        """Someone else's reservation is reported exactly like a missing one."""
        st = store or common._store()
        r = st.get_by_id_for_user(reservation_id, user_id)
        if r is None:
            raise ReservationNotFoundError(f"Error: reservation with ID '{reservation_id}' not found")
        return ReservationQueryService.to_dto(r, st)
