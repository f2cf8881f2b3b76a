from datetime import datetime

from rentacar.exceptions import InvalidWindowError


def validate_window(pick_up_time: datetime, drop_off_time: datetime, now: datetime) -> None:
    """
    Reject a pick-up in the past and any window that is empty or reversed.
    Pure: raises InvalidWindowError or returns None.
    """
    if pick_up_time is None or drop_off_time is None:
        raise InvalidWindowError("Error: pick up and drop off times are required")
    if pick_up_time < now:
        raise InvalidWindowError("Error: pick up time can not be in the past")
    if pick_up_time == drop_off_time or not pick_up_time < drop_off_time:
        raise InvalidWindowError("Error: pick up time must be before drop off time")
