from datetime import datetime, timedelta

import pytest

from rentacar.exceptions import InvalidWindowError
from rentacar.models.car import Car
from rentacar.services.pricing import billable_hours, total_price

T = datetime(2030, 5, 1, 10, 0)
CAR = Car(car_id="c1", price_per_hour=10)


def test_partial_hour_rounds_up():
    assert total_price(CAR, T, T + timedelta(minutes=61)) == 20
    assert total_price(CAR, T, T + timedelta(minutes=1)) == 10


def test_exact_hour_is_not_rounded():
    assert total_price(CAR, T, T + timedelta(minutes=60)) == 10
    assert total_price(CAR, T, T + timedelta(days=1)) == 240


def test_seconds_are_truncated_to_whole_minutes():
    assert billable_hours(T, T + timedelta(minutes=60, seconds=59)) == 1


def test_reversed_window_fails():
    with pytest.raises(InvalidWindowError):
        total_price(CAR, T, T - timedelta(minutes=5))
