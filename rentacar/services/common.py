"""Shared service helpers: store access, clock, lookups and datetime parsing."""

from datetime import datetime
from typing import Optional

import pytz
from flask import current_app, has_app_context

from rentacar.config import Config
from rentacar.exceptions import CarNotFoundError, UserNotFoundError
from rentacar.models.car import Car
from rentacar.models.store import Store
from rentacar.models.user import User
from rentacar.utils.constants import DATETIME_FMT


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def _now(tz_name: Optional[str] = None) -> datetime:
    """
    Current wall-clock time in the rental timezone, as a naive datetime.
    Reservation timestamps are naive local times, so `now` must be too.
    The running app's TIMEZONE wins over the environment default.
    """
    if tz_name is None and has_app_context():
        tz_name = current_app.config.get("TIMEZONE")
    tz = pytz.timezone(tz_name or Config.TIMEZONE)
    return datetime.now(tz).replace(tzinfo=None)


def parse_datetime(s: str) -> datetime:
    """Parse 'MM/DD/YYYY HH:MM:SS' into a datetime; raise ValueError on bad input."""
    return datetime.strptime((s or "").strip(), DATETIME_FMT)


def fmt_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(DATETIME_FMT) if value is not None else None


# -------- collaborator lookups --------
def load_car(car_id: str, store: Optional[Store] = None) -> Car:
    """Return a car by ID or raise CarNotFoundError."""
    st = store or _store()
    car = st.get_car(car_id)
    if car is None:
        raise CarNotFoundError(f"Error: car with ID '{car_id}' not found")
    return car


def load_user(user_id: str, store: Optional[Store] = None) -> User:
    """Return a user by ID or raise UserNotFoundError."""
    st = store or _store()
    user = st.get_user(user_id)
    if user is None:
        raise UserNotFoundError(f"Error: user with ID '{user_id}' not found")
    return user
