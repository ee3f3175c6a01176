"""
Per-entity-type record stores.

Each entity type gets one RecordStore holding its read state and the records
of the last successful load:

    DEFAULT --begin()--> STARTED --succeed()--> SUCCESS
                                 `--fail()-----> FAILURE

reset() is the only way back to DEFAULT. Subscribers are called with the new
snapshot after every transition.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from app.crm.client import CRMClient
    from app.crm.query import QueryDescriptor

logger = logging.getLogger(__name__)


class ReadState(str, Enum):
    DEFAULT = "default"
    STARTED = "started"
    SUCCESS = "success"
    FAILURE = "failure"


class InvalidTransition(RuntimeError):
    pass


@dataclass(frozen=True)
class StoreSnapshot:
    entity_type: str
    state: ReadState = ReadState.DEFAULT
    records: tuple[dict[str, Any], ...] = ()
    error: str | None = None


Subscriber = Callable[[StoreSnapshot], None]


class RecordStore:
    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        self._snapshot = StoreSnapshot(entity_type=entity_type)
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def state(self) -> ReadState:
        return self._snapshot.state

    @property
    def records(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._snapshot.records]

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, snap: StoreSnapshot) -> None:
        for cb in list(self._subscribers):
            try:
                cb(snap)
            except Exception:
                logger.exception("Store subscriber failed (entity_type=%s)", self.entity_type)

    def begin(self) -> bool:
        """Claim the load. False (and no change) unless the store is still DEFAULT."""
        with self._lock:
            if self._snapshot.state is not ReadState.DEFAULT:
                return False
            snap = StoreSnapshot(entity_type=self.entity_type, state=ReadState.STARTED)
            self._snapshot = snap
        self._publish(snap)
        return True

    def succeed(self, records: list[dict[str, Any]]) -> None:
        with self._lock:
            self._require(ReadState.STARTED, ReadState.SUCCESS)
            snap = StoreSnapshot(
                entity_type=self.entity_type,
                state=ReadState.SUCCESS,
                records=tuple(dict(r) for r in records),
            )
            self._snapshot = snap
        self._publish(snap)

    def fail(self, error: str) -> None:
        with self._lock:
            self._require(ReadState.STARTED, ReadState.FAILURE)
            snap = StoreSnapshot(entity_type=self.entity_type, state=ReadState.FAILURE, error=error)
            self._snapshot = snap
        self._publish(snap)

    def reset(self) -> None:
        with self._lock:
            snap = StoreSnapshot(entity_type=self.entity_type)
            self._snapshot = snap
        self._publish(snap)

    def _require(self, expected: ReadState, target: ReadState) -> None:
        current = self._snapshot.state
        if current is not expected:
            raise InvalidTransition(f"{self.entity_type}: cannot move {current.value} -> {target.value}")


@dataclass
class StoreRegistry:
    stores: dict[str, RecordStore] = field(default_factory=dict)

    @classmethod
    def for_types(cls, entity_types: list[str]) -> "StoreRegistry":
        return cls({t: RecordStore(t) for t in entity_types})

    def __getitem__(self, entity_type: str) -> RecordStore:
        return self.stores[entity_type]

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self.stores

    def subscribe_all(self, callback: Subscriber) -> None:
        for s in self.stores.values():
            s.subscribe(callback)

    def reset(self, *entity_types: str) -> None:
        for t in entity_types:
            if t in self.stores:
                self.stores[t].reset()


class DataLoader:
    """Runs one list load for a store: STARTED, then SUCCESS or FAILURE."""

    def __init__(self, client: "CRMClient", store: RecordStore):
        self.client = client
        self.store = store

    def load(self, query: "QueryDescriptor") -> bool:
        if not self.store.begin():
            return False
        try:
            records = self.client.list_records(query)
        except Exception as e:
            logger.error("CRM load failed (entity_type=%s): %s", self.store.entity_type, e)
            self.store.fail(str(e) or e.__class__.__name__)
            return True
        self.store.succeed(records)
        return True


def log_transition(snap: StoreSnapshot) -> None:
    if snap.state is ReadState.FAILURE:
        logger.warning("store %s -> %s (%s)", snap.entity_type, snap.state.value, snap.error)
    else:
        logger.info("store %s -> %s (%s records)", snap.entity_type, snap.state.value, len(snap.records))
