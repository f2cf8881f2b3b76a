# rentacar/utils/constants.py

"""
Global constants for roles, reservation statuses and wire formats.
These constants are imported by both models and services.
"""

# Wire format for pick-up / drop-off timestamps (e.g. 05/21/2030 10:00:00)
DATETIME_FMT = "%m/%d/%Y %H:%M:%S"

# Locations are free text but bounded
MAX_LOCATION_LENGTH = 150


class Role:
    ADMIN = "admin"
    CUSTOMER = "customer"


class ReservationStatus:
    CREATED = "CREATED"
    CANCELED = "CANCELED"
    DONE = "DONE"

    ALL = (CREATED, CANCELED, DONE)
    TERMINAL = frozenset({CANCELED, DONE})


class SortDirection:
    ASC = "ASC"
    DESC = "DESC"


# Reservations in these states never block a car
INACTIVE_STATUSES = ReservationStatus.TERMINAL

# Fields a reservation listing can be sorted by
SORTABLE_FIELDS = {
    "id",
    "seq",
    "car_id",
    "user_id",
    "pick_up_time",
    "drop_off_time",
    "pick_up_location",
    "drop_off_location",
    "status",
    "total_price",
}
