"""Reservation lifecycle: create, update, remove and availability checks."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from rentacar.exceptions import (
    CarUnavailableError,
    LifecycleViolationError,
    ReservationNotFoundError,
)
from rentacar.models.car import Car
from rentacar.models.reservation import Reservation, ReservationRequest, ReservationUpdateRequest
from rentacar.models.store import Store
from rentacar.models.user import User
from rentacar.services import common, pricing
from rentacar.services.overlap import find_conflicts
from rentacar.services.window import validate_window
from rentacar.utils.constants import INACTIVE_STATUSES, ReservationStatus

logger = logging.getLogger(__name__)


class ReservationService:
    """
    Owns the reservation state machine:

        CREATED --> CANCELED
        CREATED --> DONE
        CREATED --> CREATED   (window / locations / car amended)

    CANCELED and DONE are terminal. Every check runs before the single write,
    so a failed call leaves the store untouched.

    No locking happens here. Concurrent bookings of the same car are only
    safe when the caller holds `store.car_lock(car_id)` around the call.
    """

    @staticmethod
    def create_reservation(
            request: ReservationRequest,
            user: User,
            car: Car,
            store: Optional[Store] = None,
            now: Optional[datetime] = None,
    ) -> Reservation:
        st = store or common._store()
        validate_window(request.pick_up_time, request.drop_off_time, now or common._now())

        if not ReservationService.check_car_availability(
                car, request.pick_up_time, request.drop_off_time, store=st):
            logger.info("Rejected booking of car %s for %s - %s: window taken",
                        car.car_id, request.pick_up_time, request.drop_off_time)
            raise CarUnavailableError()

        reservation = Reservation(
            car_id=car.car_id,
            user_id=user.user_id,
            pick_up_time=request.pick_up_time,
            drop_off_time=request.drop_off_time,
            pick_up_location=request.pick_up_location,
            drop_off_location=request.drop_off_location,
            status=ReservationStatus.CREATED,
            total_price=ReservationService.total_price(car, request.pick_up_time, request.drop_off_time),
        )
        rid = st.insert(reservation)
        logger.info("Reservation %s created: car=%s user=%s total=%.2f",
                    rid, car.car_id, user.user_id, reservation.total_price)
        return replace(reservation, id=rid)

    @staticmethod
    def update_reservation(
            reservation_id: str,
            car: Car,
            update: ReservationUpdateRequest,
            store: Optional[Store] = None,
            now: Optional[datetime] = None,
    ) -> Reservation:
        """
        Amend a CREATED reservation.

        Target status CREATED re-validates the window, re-checks conflicts
        (ignoring the reservation itself), reprices and moves it to `car`.
        Any other target status applies the given fields as-is: the window is
        NOT revalidated on a terminal transition.
        """
        st = store or common._store()
        current = ReservationService.get_by_id(reservation_id, store=st)

        if current.status in ReservationStatus.TERMINAL:
            raise LifecycleViolationError(
                f"Error: reservation '{reservation_id}' is {current.status} and can not be changed")
        if update.status not in ReservationStatus.ALL:
            raise LifecycleViolationError(f"Error: unknown reservation status '{update.status}'")

        car_id = current.car_id
        price = current.total_price
        if update.status == ReservationStatus.CREATED:
            validate_window(update.pick_up_time, update.drop_off_time, now or common._now())
            conflicts = find_conflicts(car.car_id, update.pick_up_time, update.drop_off_time,
                                       INACTIVE_STATUSES, store=st)
            others = {r.id for r in conflicts} - {current.id}
            if others:
                logger.info("Rejected update of reservation %s: conflicts with %s",
                            reservation_id, sorted(others))
                raise CarUnavailableError()
            price = ReservationService.total_price(car, update.pick_up_time, update.drop_off_time)
            car_id = car.car_id
        elif not update.pick_up_time < update.drop_off_time:
            logger.warning("Reservation %s moved to %s with pick up %s not before drop off %s",
                           reservation_id, update.status, update.pick_up_time, update.drop_off_time)

        updated = replace(
            current,
            car_id=car_id,
            pick_up_time=update.pick_up_time,
            drop_off_time=update.drop_off_time,
            pick_up_location=update.pick_up_location,
            drop_off_location=update.drop_off_location,
            status=update.status,
            total_price=price,
        )
        if not st.update(updated, expected=current):
            # changed or removed between load and write
            latest = ReservationService.get_by_id(reservation_id, store=st)
            if latest.status in ReservationStatus.TERMINAL:
                raise LifecycleViolationError(
                    f"Error: reservation '{reservation_id}' is {latest.status} and can not be changed")
            raise LifecycleViolationError(
                f"Error: reservation '{reservation_id}' was changed concurrently, please retry")
        logger.info("Reservation %s updated: status=%s car=%s total=%.2f",
                    reservation_id, updated.status, updated.car_id, updated.total_price)
        return updated

    @staticmethod
    def remove_by_id(reservation_id: str, store: Optional[Store] = None) -> None:
        """Delete regardless of status. Unlike cancellation, this drops the record."""
        st = store or common._store()
        if not st.delete_by_id(reservation_id):
            raise ReservationNotFoundError(f"Error: reservation with ID '{reservation_id}' not found")
        logger.info("Reservation %s removed", reservation_id)

    @staticmethod
    def check_car_availability(car: Car, pick_up_time: datetime, drop_off_time: datetime,
                               store: Optional[Store] = None) -> bool:
        return not find_conflicts(car.car_id, pick_up_time, drop_off_time, INACTIVE_STATUSES, store=store)

    @staticmethod
    def total_price(car: Car, pick_up_time: datetime, drop_off_time: datetime) -> float:
        return pricing.total_price(car, pick_up_time, drop_off_time)

    @staticmethod
    def get_by_id(reservation_id: str, store: Optional[Store] = None) -> Reservation:
        """Return a reservation by ID or raise ReservationNotFoundError."""
        st = store or common._store()
        r = st.get_by_id(reservation_id)
        if r is None:
            raise ReservationNotFoundError(f"Error: reservation with ID '{reservation_id}' not found")
        return r

    @staticmethod
    def exists_by_car(car_id: str, store: Optional[Store] = None) -> bool:
        return (store or common._store()).exists_for_car(car_id)

    @staticmethod
    def exists_by_user(user_id: str, store: Optional[Store] = None) -> bool:
        return (store or common._store()).exists_for_user(user_id)
