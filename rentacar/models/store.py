import atexit
import os
import pickle
import threading
import uuid
from bisect import bisect_right, insort
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Iterator, Optional

from rentacar.config import Config
from rentacar.exceptions import InvalidPageRequestError
from rentacar.models.car import Car
from rentacar.models.page import Page
from rentacar.models.reservation import Reservation, overlaps_inclusive
from rentacar.models.user import User
from rentacar.utils.constants import SORTABLE_FIELDS, SortDirection

# ---- Paths ----
DEFAULT_DATA_PATH = Config.DATA_PATH

# instance() called without a path; an explicit None means memory only
_UNSET = object()


class Store:
    """
    Reservation store plus the car/user lookups the engine needs.

    All records are kept in dicts keyed by id. Reservations are also indexed
    per car as a list of (pick_up_time, id) sorted by pick-up, which is what
    the overlap query walks.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        # path None -> memory only, nothing is written
        self.path = str(path) if path else None
        self.cars: dict[str, Car] = {}
        self.users: dict[str, User] = {}
        self.reservations: dict[str, Reservation] = {}
        self._by_car: dict[str, list[tuple[datetime, str]]] = {}
        self._seq = 0
        self._rw = threading.RLock()
        self._car_locks: dict[str, threading.RLock] = {}
        self._car_locks_guard = threading.Lock()

        print(f"[Store] Using file: {self.path or '<memory>'}")
        self._load()

        # Automatically save on exit (skipped in test environments)
        if self.path and not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path=_UNSET):
        """
        Return the global singleton instance of Store.
        Without a path the configured default file is used; `None` keeps it in memory.
        """
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(DEFAULT_DATA_PATH if path is _UNSET else path)
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except Exception as e:
            print(f"[Store] Load failed ({e}); starting empty.")
            return

        if isinstance(data, dict) and "reservations" in data:
            self.cars = data.get("cars", {}) or {}
            self.users = data.get("users", {}) or {}
            self.reservations = data.get("reservations", {}) or {}
            self._reindex()
            print(
                f"[Store] Loaded: cars={len(self.cars)}, users={len(self.users)}, "
                f"reservations={len(self.reservations)}")
        else:
            # Handle incompatible data format: backup the old file and start empty
            try:
                bak = self.path + ".bak"
                os.replace(self.path, bak)
                print(f"[Store] Incompatible store ({type(data).__name__}); backed up to {bak}. Starting empty.")
            except OSError as e:
                print(f"[Store] Backup failed: {e}")

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "cars": self.cars,
            "users": self.users,
            "reservations": self.reservations,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            if self.path:
                print(f"[Store] Saving to {self.path} ...")
            self._dump()

    def clear(self):
        with self._rw:
            self.cars.clear()
            self.users.clear()
            self.reservations.clear()
            self._by_car.clear()
            self._seq = 0

    # ---------- Locking ----------
    @contextmanager
    def car_lock(self, car_id: str) -> Iterator[None]:
        """
        Serialize "detect conflicts + persist" for one car.
        The engine itself never locks; callers wrap create/update in this.
        """
        with self._car_locks_guard:
            lock = self._car_locks.setdefault(str(car_id), threading.RLock())
        with lock:
            yield

    @contextmanager
    def car_locks(self, *car_ids: str) -> Iterator[None]:
        """Hold the locks of several cars, always taken in sorted id order."""
        with ExitStack() as stack:
            for cid in sorted({str(c) for c in car_ids}):
                stack.enter_context(self.car_lock(cid))
            yield

    # ---------- Cars ----------
    def create_car(self, data: dict) -> str:
        """Create a new car record and return its ID."""
        with self._rw:
            cid = str(data.get("car_id") or uuid.uuid4())
            self.cars[cid] = Car(
                car_id=cid,
                price_per_hour=float(data.get("price_per_hour") or 0),
                brand=data.get("brand", ""),
                model=data.get("model", ""),
                builtin=bool(data.get("builtin", False)),
            )
            self._dump()
            return cid

    def get_car(self, car_id: str) -> Car | None:
        return self.cars.get(str(car_id))

    # ---------- Users ----------
    def create_user(self, username: str, role: str, user_id: str | None = None) -> str:
        """Create a new user and return its ID."""
        with self._rw:
            if self.find_user(username):
                raise ValueError("Username already exists")
            uid = str(user_id or uuid.uuid4())
            self.users[uid] = User(user_id=uid, username=username, role=role)
            self._dump()
            return uid

    def find_user(self, username: str) -> User | None:
        for u in self.users.values():
            if u.username == username:
                return u
        return None

    def get_user(self, user_id: str) -> User | None:
        return self.users.get(str(user_id))

    # ---------- Reservations ----------
    def _reindex(self):
        self._by_car = {}
        self._seq = max((r.seq for r in self.reservations.values()), default=0)
        for r in self.reservations.values():
            self._by_car.setdefault(r.car_id, []).append((r.pick_up_time, r.id))
        for entries in self._by_car.values():
            entries.sort()

    def _index_add(self, r: Reservation):
        insort(self._by_car.setdefault(r.car_id, []), (r.pick_up_time, r.id))

    def _index_remove(self, r: Reservation):
        entries = self._by_car.get(r.car_id)
        if not entries:
            return
        try:
            entries.remove((r.pick_up_time, r.id))
        except ValueError:
            return
        if not entries:
            del self._by_car[r.car_id]

    def insert(self, reservation: Reservation) -> str:
        """Store a new reservation under a fresh id and return the id."""
        with self._rw:
            rid = str(uuid.uuid4())
            self._seq += 1
            rec = replace(reservation, id=rid, seq=self._seq)
            self.reservations[rid] = rec
            self._index_add(rec)
            self._dump()
            return rid

    def update(self, reservation: Reservation, expected: Reservation | None = None) -> bool:
        """
        Full replace by id; False if the id is gone.

        With `expected`, the replace only happens while the stored record still
        equals it, so a write based on a stale read is refused (False).
        """
        with self._rw:
            old = self.reservations.get(reservation.id)
            if old is None:
                return False
            if expected is not None and old != expected:
                return False
            reservation = replace(reservation, seq=old.seq)
            self._index_remove(old)
            self.reservations[reservation.id] = reservation
            self._index_add(reservation)
            self._dump()
            return True

    def delete_by_id(self, reservation_id: str) -> bool:
        with self._rw:
            r = self.reservations.pop(str(reservation_id), None)
            if r is None:
                return False
            self._index_remove(r)
            self._dump()
            return True

    def get_by_id(self, reservation_id: str) -> Reservation | None:
        return self.reservations.get(str(reservation_id))

    def get_by_id_for_user(self, reservation_id: str, user_id: str) -> Reservation | None:
        r = self.get_by_id(reservation_id)
        if r is None or r.user_id != str(user_id):
            return None
        return r

    def find_conflicting(self, car_id: str, pick_up_time: datetime, drop_off_time: datetime,
                         excluded_statuses: Iterable[str]) -> list[Reservation]:
        """
        Reservations on `car_id` whose status is not excluded and whose window
        intersects [pick_up_time, drop_off_time], boundaries included.
        """
        excluded = set(excluded_statuses or ())
        with self._rw:
            entries = self._by_car.get(str(car_id), [])
            # anything picked up after the requested drop-off cannot intersect
            hi = bisect_right(entries, drop_off_time, key=lambda e: e[0])
            out = []
            for _, rid in entries[:hi]:
                r = self.reservations[rid]
                if r.status in excluded:
                    continue
                if overlaps_inclusive(pick_up_time, drop_off_time, r.pick_up_time, r.drop_off_time):
                    out.append(r)
            return out

    def list_all(self) -> list[Reservation]:
        return list(self.reservations.values())

    def list_all_paged(self, page: int, size: int, sort_field: str = "seq",
                       direction: str = SortDirection.DESC) -> Page:
        return self._page(self.list_all(), page, size, sort_field, direction)

    def list_all_paged_for_user(self, user_id: str, page: int, size: int, sort_field: str = "seq",
                                direction: str = SortDirection.DESC) -> Page:
        mine = [r for r in self.reservations.values() if r.user_id == str(user_id)]
        return self._page(mine, page, size, sort_field, direction)

    def exists_for_car(self, car_id: str) -> bool:
        return bool(self._by_car.get(str(car_id)))

    def exists_for_user(self, user_id: str) -> bool:
        return any(r.user_id == str(user_id) for r in self.reservations.values())

    @staticmethod
    def _page(records: list[Reservation], page: int, size: int, sort_field: str,
              direction: str) -> Page:
        direction = (direction or SortDirection.DESC).upper()
        if sort_field not in SORTABLE_FIELDS:
            raise InvalidPageRequestError(f"Error: can not sort reservations by '{sort_field}'")
        if direction not in (SortDirection.ASC, SortDirection.DESC):
            raise InvalidPageRequestError(f"Error: unknown sort direction '{direction}'")
        if page < 0 or size <= 0:
            raise InvalidPageRequestError("Error: page must be >= 0 and size must be > 0")

        def key(r: Reservation):
            v: Optional[object] = getattr(r, sort_field)
            # None sorts first ascending
            return (v is not None, v)

        ordered = sorted(records, key=key, reverse=direction == SortDirection.DESC)
        start = page * size
        return Page(ordered[start:start + size], page, size, len(ordered))
