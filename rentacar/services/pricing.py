import math
from datetime import datetime

from rentacar.exceptions import InvalidWindowError
from rentacar.models.car import Car


def billable_hours(pick_up_time: datetime, drop_off_time: datetime) -> int:
    """
    Whole elapsed minutes, rounded up to full hours.
    61 minutes bill as 2 hours; anything under a minute bills as 0.
    """
    if drop_off_time < pick_up_time:
        raise InvalidWindowError("Error: drop off time is before pick up time")
    minutes = int((drop_off_time - pick_up_time).total_seconds() // 60)
    return math.ceil(minutes / 60)


def total_price(car: Car, pick_up_time: datetime, drop_off_time: datetime) -> float:
    return car.get_hourly_price() * billable_hours(pick_up_time, drop_off_time)
