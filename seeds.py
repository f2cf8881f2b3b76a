from datetime import timedelta

from rentacar import create_app
from rentacar.models.reservation import ReservationRequest
from rentacar.models.store import Store
from rentacar.services.common import _now
from rentacar.services.reservation_service import ReservationService
from rentacar.utils.constants import Role


def ensure_user(store: Store, username: str, role: str) -> str:
    """
    Ensure a user with `username` exists in the store.
    - If exists: keep it (idempotent).
    - If not:   create a new user.
    """
    u = store.find_user(username)
    if u:
        return u.user_id
    return store.create_user(username, role)


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()

        # ---- Admin / Customer demo accounts ----
        ensure_user(store, "admin", Role.ADMIN)
        customer_id = ensure_user(store, "customer", Role.CUSTOMER)

        # ---- Demo cars (create only if none exist) ----
        if not store.cars:
            store.create_car({"brand": "Toyota", "model": "Corolla", "price_per_hour": 12, "builtin": True})
            store.create_car({"brand": "Honda", "model": "Civic", "price_per_hour": 14, "builtin": True})
            store.create_car({"brand": "Ford", "model": "Transit", "price_per_hour": 25})

        # ---- One upcoming booking so listings are not empty ----
        if not store.reservations:
            car = next(iter(store.cars.values()))
            start = _now().replace(minute=0, second=0, microsecond=0) + timedelta(days=1)
            ReservationService.create_reservation(
                ReservationRequest(start, start + timedelta(hours=3), "Airport", "Downtown"),
                store.get_user(customer_id),
                car,
                store=store,
            )

        store.save()

        print("✅ Seed complete.")
        print(f"🚗 Cars: {len(store.cars)}  📅 Reservations: {len(store.reservations)}")
        print("🔑 Users: admin (admin), customer (customer)")


if __name__ == "__main__":
    main()
