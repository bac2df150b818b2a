from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock

from uniview.data_loader import LoadResult
from uniview.errors import EmailExistsError, StoreUnavailableError
from uniview.models import ParkingLot, ParkingSpace, User

logger = logging.getLogger(__name__)


class ParkingStore:
    """In-process keyed tables for lots, spaces and users.

    Lots are keyed by ``lotId``, spaces by ``nodeId`` (with a per-lot view
    ordered by ``lastUpdate``) and users by ``userId`` (with an email index).
    Lot and space reads raise ``StoreUnavailableError`` until a dataset has
    been loaded.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._lots: dict[str, ParkingLot] = {}
        self._spaces: dict[str, ParkingSpace] = {}
        self._users: dict[str, User] = {}
        self._user_ids_by_email: dict[str, str] = {}
        self.source: str | None = None

    @property
    def available(self) -> bool:
        return self.source is not None

    def load(self, dataset: LoadResult) -> None:
        with self._lock:
            self._lots = {lot.lot_id: lot for lot in dataset.lots}
            self._spaces = {space.node_id: space for space in dataset.spaces}
            self.source = dataset.source
        logger.info(
            "Loaded %d lots and %d spaces from %s",
            len(self._lots),
            len(self._spaces),
            dataset.source,
        )

    def _require_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError("Parking data store is not available")

    # lots

    def get_lot(self, lot_id: str) -> ParkingLot | None:
        self._require_available()
        return self._lots.get(lot_id)

    def scan_lots(self) -> list[ParkingLot]:
        self._require_available()
        return list(self._lots.values())

    def put_lot(self, lot: ParkingLot) -> None:
        self._require_available()
        with self._lock:
            self._lots[lot.lot_id] = lot

    # spaces

    def put_space(self, space: ParkingSpace) -> None:
        self._require_available()
        with self._lock:
            self._spaces[space.node_id] = space

    def query_spaces_by_lot(self, lot_id: str) -> list[ParkingSpace]:
        self._require_available()
        spaces = [s for s in self._spaces.values() if s.lot_id == lot_id]
        spaces.sort(key=lambda s: s.last_update)
        return spaces

    # users

    def put_user(self, user: User) -> None:
        email = user.email.lower()
        with self._lock:
            if user.user_id in self._users:
                raise ValueError(f"User {user.user_id} already exists")
            if email in self._user_ids_by_email:
                raise EmailExistsError(user.email)
            self._users[user.user_id] = user
            self._user_ids_by_email[email] = user.user_id

    def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> User | None:
        user_id = self._user_ids_by_email.get(email.lower())
        if user_id is None:
            return None
        return self._users.get(user_id)

    def update_last_login(self, user_id: str, when: datetime) -> None:
        with self._lock:
            user = self._users.get(user_id)
            if user is not None:
                self._users[user_id] = user.model_copy(update={"last_login": when})
