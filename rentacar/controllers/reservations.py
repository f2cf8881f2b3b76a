from flask import Blueprint, current_app, jsonify, request, session
from werkzeug.exceptions import BadRequest

from ..models.reservation import ReservationRequest, ReservationUpdateRequest
from ..services import common
from ..services.query_service import ReservationQueryService
from ..services.reservation_service import ReservationService
from ..utils.constants import MAX_LOCATION_LENGTH, ReservationStatus, Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("reservations", __name__, url_prefix="/reservations")

ANY_ROLE = (Role.ADMIN, Role.CUSTOMER)


# ---------- request parsing ----------
def _required_arg(name: str) -> str:
    value = (request.args.get(name) or "").strip()
    if not value:
        raise BadRequest(f"Missing query parameter '{name}'")
    return value


def _datetime_field(data: dict, name: str):
    raw = data.get(name)
    if not raw:
        raise BadRequest(f"Please provide '{name}'")
    try:
        return common.parse_datetime(raw)
    except (TypeError, ValueError):
        raise BadRequest(f"'{name}' must look like MM/DD/YYYY HH:MM:SS")


def _location_field(data: dict, name: str) -> str:
    value = (data.get(name) or "").strip()
    if not value:
        raise BadRequest(f"Please provide '{name}'")
    if len(value) > MAX_LOCATION_LENGTH:
        raise BadRequest(f"'{name}' must be max {MAX_LOCATION_LENGTH} chars")
    return value


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _reservation_request() -> ReservationRequest:
    data = _json_body()
    return ReservationRequest(
        pick_up_time=_datetime_field(data, "pick_up_time"),
        drop_off_time=_datetime_field(data, "drop_off_time"),
        pick_up_location=_location_field(data, "pick_up_location"),
        drop_off_location=_location_field(data, "drop_off_location"),
    )


def _update_request() -> ReservationUpdateRequest:
    data = _json_body()
    status = (data.get("status") or ReservationStatus.CREATED).strip().upper()
    if status not in ReservationStatus.ALL:
        raise BadRequest(f"Unknown status '{status}'")
    return ReservationUpdateRequest(
        pick_up_time=_datetime_field(data, "pick_up_time"),
        drop_off_time=_datetime_field(data, "drop_off_time"),
        pick_up_location=_location_field(data, "pick_up_location"),
        drop_off_location=_location_field(data, "drop_off_location"),
        status=status,
    )


def _page_args() -> dict:
    try:
        page = int(request.args.get("page", 0))
        size = int(request.args.get("size", current_app.config["DEFAULT_PAGE_SIZE"]))
    except ValueError:
        raise BadRequest("'page' and 'size' must be integers")
    return {
        "page": page,
        "size": size,
        "sort": request.args.get("sort") or "seq",
        "direction": request.args.get("direction") or current_app.config["SORT_DIRECTION"],
    }


def _message(text: str, status: int = 200, **extra):
    body = {"message": text, "success": True}
    body.update(extra)
    return jsonify(body), status


# ---------- booking ----------
@bp.post("/add")
@login_required
@role_required(*ANY_ROLE)
def make_reservation():
    """Book a car for the logged-in user."""
    car = common.load_car(_required_arg("car_id"))
    user = common.load_user(session.get("uid"))
    req = _reservation_request()
    with common._store().car_lock(car.car_id):
        r = ReservationService.create_reservation(req, user, car)
    return _message("Reservation created successfully", 201, id=r.id)


@bp.post("/add/auth")
@login_required
@role_required(Role.ADMIN)
def add_reservation():
    """Admin: book a car on behalf of a user."""
    car = common.load_car(_required_arg("car_id"))
    user = common.load_user(_required_arg("user_id"))
    req = _reservation_request()
    with common._store().car_lock(car.car_id):
        r = ReservationService.create_reservation(req, user, car)
    return _message("Reservation created successfully", 201, id=r.id)


@bp.get("/auth")
@login_required
@role_required(*ANY_ROLE)
def check_car_is_available():
    """Availability of a car for a window, with the price it would cost."""
    car = common.load_car(_required_arg("car_id"))
    args = request.args.to_dict()
    pick_up = _datetime_field(args, "pick_up_time")
    drop_off = _datetime_field(args, "drop_off_time")
    available = ReservationService.check_car_availability(car, pick_up, drop_off)
    price = ReservationService.total_price(car, pick_up, drop_off)
    return _message("Car availability checked", available=available, total_price=price)


@bp.put("/admin/auth")
@login_required
@role_required(Role.ADMIN)
def update_reservation():
    car = common.load_car(_required_arg("car_id"))
    rid = _required_arg("reservation_id")
    upd = _update_request()
    current = ReservationService.get_by_id(rid)
    # the car it leaves and the car it moves to
    with common._store().car_locks(current.car_id, car.car_id):
        ReservationService.update_reservation(rid, car, upd)
    return _message("Reservation updated successfully")


@bp.delete("/admin/<rid>/auth")
@login_required
@role_required(Role.ADMIN)
def delete_reservation(rid):
    ReservationService.remove_by_id(rid)
    return _message("Reservation deleted successfully")


# ---------- listings ----------
@bp.get("/admin/all")
@login_required
@role_required(Role.ADMIN)
def all_reservations():
    return jsonify(ReservationQueryService.all_reservations())


@bp.get("/admin/all/pages")
@login_required
@role_required(Role.ADMIN)
def all_reservations_paged():
    page = ReservationQueryService.reservation_page(**_page_args())
    return jsonify(page.to_dict())


@bp.get("/admin/auth/all")
@login_required
@role_required(Role.ADMIN)
def user_reservations_paged():
    user = common.load_user(_required_arg("user_id"))
    page = ReservationQueryService.reservation_page_for_user(user.user_id, **_page_args())
    return jsonify(page.to_dict())


@bp.get("/auth/all")
@login_required
@role_required(*ANY_ROLE)
def my_reservations_paged():
    user = common.load_user(session.get("uid"))
    page = ReservationQueryService.reservation_page_for_user(user.user_id, **_page_args())
    return jsonify(page.to_dict())


@bp.get("/<rid>")
@login_required
@role_required(Role.ADMIN)
def get_reservation(rid):
    return jsonify(ReservationQueryService.get_reservation(rid))


@bp.get("/<rid>/auth")
@login_required
@role_required(*ANY_ROLE)
def get_my_reservation(rid):
    user = common.load_user(session.get("uid"))
    return jsonify(ReservationQueryService.get_reservation_for_user(rid, user.user_id))
