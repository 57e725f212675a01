import json
import logging
import threading
import time
from typing import Callable, List, Optional

import settings
from db import LocalStorage
from errors import StorageUnavailable
from models import ContactRecord, Status, isoformat, utcnow

logger = logging.getLogger(__name__)


class ContactStore:
    """
    Owns the list of contacts, newest first. Storage holds a JSON snapshot of
    the list under one key; after load() the in-memory list is authoritative
    and every mutation rewrites the whole snapshot.

    If storage fails the mutation still applies in memory, the error is kept
    in ``storage_error`` and the store keeps running in memory until a later
    save succeeds.
    """
    def __init__(self, storage: LocalStorage, key: Optional[str] = None,
                 clock: Callable = utcnow, millis: Optional[Callable[[], int]] = None):
        self.storage = storage
        self.key = key or settings.STORAGE_KEY
        self.clock = clock
        self._millis = millis or (lambda: int(time.time() * 1000))
        self._contacts: List[ContactRecord] = []
        self._last_id = 0
        self._lock = threading.Lock()
        self.storage_error: Optional[StorageUnavailable] = None

    @property
    def degraded(self) -> bool:
        return self.storage_error is not None

    def load(self) -> List[ContactRecord]:
        try:
            raw = self.storage.get_item(self.key)
            self.storage_error = None
        except StorageUnavailable as e:
            logger.warning("Storage unavailable, starting with an empty in-memory list: %s", e)
            self.storage_error = e
            raw = None

        contacts = []
        if raw:
            try:
                entries = json.loads(raw)
            except ValueError:
                logger.warning("Stored contacts under %s are not valid JSON; ignoring", self.key)
                entries = []
            if not isinstance(entries, list):
                logger.warning("Stored contacts under %s are not a list; ignoring", self.key)
                entries = []
            for entry in entries:
                try:
                    contacts.append(ContactRecord.from_dict(entry))
                except (ValueError, TypeError) as e:
                    logger.warning("Skipping unreadable contact entry: %s", e)

        with self._lock:
            self._contacts = contacts
            self._last_id = max([self._last_id] + [c.id for c in contacts])
        logger.info("Loaded %d contact(s) from %s", len(contacts), self.key)
        return list(contacts)

    def save(self) -> None:
        """Write the whole list under the storage key. Raises StorageUnavailable."""
        payload = json.dumps([c.to_dict() for c in self._contacts], ensure_ascii=False)
        self.storage.set_item(self.key, payload)

    def _persist(self):
        try:
            self.save()
        except StorageUnavailable as e:
            if not self.degraded:
                logger.warning("Could not persist contacts, continuing in memory only: %s", e)
            self.storage_error = e
        else:
            if self.degraded:
                logger.info("Storage available again")
            self.storage_error = None

    def get_all(self) -> List[ContactRecord]:
        return list(self._contacts)

    def get(self, contact_id: int) -> Optional[ContactRecord]:
        for contact in self._contacts:
            if contact.id == contact_id:
                return contact
        return None

    def next_id(self) -> int:
        """Millisecond-clock id, bumped so it is always above every id seen so far."""
        with self._lock:
            self._last_id = max(self._millis(), self._last_id + 1)
            return self._last_id

    def insert(self, record: ContactRecord) -> None:
        with self._lock:
            if any(c.id == record.id for c in self._contacts):
                raise ValueError(f"Contact id {record.id} already exists")
            self._contacts.insert(0, record)
            self._last_id = max(self._last_id, record.id)
            self._persist()

    def remove(self, contact_id: int) -> bool:
        with self._lock:
            remaining = [c for c in self._contacts if c.id != contact_id]
            if len(remaining) == len(self._contacts):
                return False
            self._contacts = remaining
            self._persist()
        return True

    def update_status(self, contact_id: int, status) -> bool:
        status = Status(status)
        with self._lock:
            contact = self.get(contact_id)
            if contact is None:
                return False
            contact.status = status
            contact.updated_at = isoformat(self.clock())
            self._persist()
        return True
