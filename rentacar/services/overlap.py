from datetime import datetime
from typing import Iterable, Optional

from rentacar.exceptions import InvalidWindowError
from rentacar.models.reservation import Reservation
from rentacar.models.store import Store
from rentacar.services import common
from rentacar.utils.constants import INACTIVE_STATUSES


def find_conflicts(
        car_id: str,
        pick_up_time: datetime,
        drop_off_time: datetime,
        excluded_statuses: Iterable[str] = INACTIVE_STATUSES,
        store: Optional[Store] = None,
) -> list[Reservation]:
    """
    Every reservation on `car_id` that blocks [pick_up_time, drop_off_time].

    Reservations whose status is in `excluded_statuses` never block. Touching
    boundaries count as a conflict. The full list is returned so an update can
    tell a clash with itself from a clash with another booking.
    """
    if pick_up_time > drop_off_time:
        raise InvalidWindowError("Error: pick up time is after drop off time")

    st = store or common._store()
    return st.find_conflicting(str(car_id), pick_up_time, drop_off_time, set(excluded_statuses))
