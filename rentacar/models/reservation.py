from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rentacar.utils.constants import ReservationStatus


@dataclass(frozen=True)
class Reservation:
    """
    A booked time window on one car for one user.

    Car and user are referenced by identifier. Records are immutable; the
    lifecycle manager builds a new record and the store replaces it by id.
    """
    car_id: str
    user_id: str
    pick_up_time: datetime
    drop_off_time: datetime
    pick_up_location: str
    drop_off_location: str
    status: str = ReservationStatus.CREATED
    total_price: float = 0.0
    id: Optional[str] = field(default=None, compare=False)
    # insertion order, assigned by the store; listings sort newest first on it
    seq: int = field(default=0, compare=False)


@dataclass
class ReservationRequest:
    """Booking request: the window and the two locations."""
    pick_up_time: datetime
    drop_off_time: datetime
    pick_up_location: str
    drop_off_location: str


@dataclass
class ReservationUpdateRequest:
    """
    Amendment of an existing reservation. The target `status` decides whether
    the window is re-checked: only CREATED triggers conflict and price checks.
    """
    pick_up_time: datetime
    drop_off_time: datetime
    pick_up_location: str
    drop_off_location: str
    status: str = ReservationStatus.CREATED


def overlaps_inclusive(pick_up_time: datetime, drop_off_time: datetime,
                       other_pick_up: datetime, other_drop_off: datetime) -> bool:
    """
    Closed-interval intersection of [pick_up_time, drop_off_time] and
    [other_pick_up, other_drop_off].

    Equivalent to: the other pick-up or drop-off falls inside the requested
    window, or the requested pick-up falls inside the other window. Windows
    that only touch (10:00-12:00 and 12:00-13:00) DO overlap.
    """
    return other_pick_up <= drop_off_time and pick_up_time <= other_drop_off
