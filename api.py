# api.py
import logging
import random
import time
from typing import Callable, List, Mapping, Optional

from PySide6.QtCore import QObject, Signal, Slot

import settings
from errors import ContactError, TransientServiceError, ValidationError
from models import ContactRecord, Status, isoformat, utcnow
from store import ContactStore
from validators import format_errors, validate_contact

logger = logging.getLogger(__name__)

OPTIONAL_FIELDS = ("phone", "company")


class ContactAPI:
    """
    Stand-in for a contact backend: each call waits a fixed delay, creates
    may fail at random, then the work is handed to the store.
    """
    def __init__(self, store: ContactStore, failure_probability: Optional[float] = None,
                 create_delay: Optional[float] = None, mutate_delay: Optional[float] = None,
                 rng: Optional[random.Random] = None, sleep: Callable[[float], None] = time.sleep,
                 clock: Callable = utcnow):
        if failure_probability is None:
            failure_probability = settings.FAILURE_PROBABILITY
        if not 0.0 <= failure_probability <= 1.0:
            raise ValueError(f"failure_probability must be between 0 and 1, got {failure_probability}")
        self.store = store
        self.failure_probability = failure_probability
        self.create_delay = settings.CREATE_DELAY if create_delay is None else create_delay
        self.mutate_delay = settings.MUTATE_DELAY if mutate_delay is None else mutate_delay
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.clock = clock

    def save_contact(self, data: Mapping[str, str]) -> ContactRecord:
        errors = validate_contact(data)
        if errors:
            raise ValidationError(errors)

        self.sleep(self.create_delay)
        # failure_probability 0 never fails, 1 always fails
        if self.rng.random() < self.failure_probability:
            logger.warning("Simulated server error while saving contact from %s", data.get("email"))
            raise TransientServiceError("Server error occurred")

        record = ContactRecord(
            id=self.store.next_id(),
            first_name=data["firstName"],
            last_name=data["lastName"],
            email=data["email"],
            subject=data["subject"],
            message=data["message"],
            timestamp=isoformat(self.clock()),
            status=Status.NEW,
            **{f: (data.get(f) or None) for f in OPTIONAL_FIELDS},
        )
        self.store.insert(record)
        logger.info("Contact %s saved (%s)", record.id, record.email)
        return record

    def delete_contact(self, contact_id: int) -> bool:
        self.sleep(self.mutate_delay)
        found = self.store.remove(contact_id)
        if found:
            logger.info("Contact %s deleted", contact_id)
        else:
            logger.debug("Delete ignored, no contact with id %s", contact_id)
        return found

    def update_contact_status(self, contact_id: int, status) -> bool:
        self.sleep(self.mutate_delay)
        found = self.store.update_status(contact_id, status)
        if found:
            logger.info("Contact %s marked %s", contact_id, Status(status).value)
        else:
            logger.debug("Status update ignored, no contact with id %s", contact_id)
        return found

    def get_contacts(self) -> List[ContactRecord]:
        return self.store.get_all()


class ContactSignals(QObject):
    saved = Signal(object)         # ContactRecord
    failed = Signal(str)           # user-facing message
    # ids are millisecond timestamps, too wide for a Qt int
    deleted = Signal(object, bool)              # contact_id, found
    status_updated = Signal(object, str, bool)  # contact_id, status, found
    save_finished = Signal()       # only after a create, success or not
    finished = Signal()            # after every operation


class ContactWorker(QObject):
    """
    Runs in a QThread so the simulated delays never block the window.
    Results go back to the Qt thread through ContactSignals; one operation
    runs at a time on the worker's thread.
    """
    def __init__(self, api: ContactAPI):
        super().__init__()
        self.api = api
        self.signals = ContactSignals()

    @Slot(object)
    def save(self, data):
        try:
            record = self.api.save_contact(data)
        except ValidationError as e:
            self.signals.failed.emit(format_errors(e.errors))
        except (ContactError, ValueError) as e:
            logger.error("Error saving contact: %s", e)
            self.signals.failed.emit("Failed to save contact. Please try again.")
        else:
            self.signals.saved.emit(record)
        finally:
            self.signals.save_finished.emit()
            self.signals.finished.emit()

    @Slot(object)
    def delete(self, contact_id):
        try:
            found = self.api.delete_contact(contact_id)
        except (ContactError, ValueError) as e:
            logger.error("Error deleting contact: %s", e)
            self.signals.failed.emit("Failed to delete contact. Please try again.")
        else:
            self.signals.deleted.emit(contact_id, found)
        finally:
            self.signals.finished.emit()

    @Slot(object, str)
    def update_status(self, contact_id, status):
        try:
            found = self.api.update_contact_status(contact_id, status)
        except (ContactError, ValueError) as e:
            logger.error("Error updating contact: %s", e)
            self.signals.failed.emit("Failed to update contact status.")
        else:
            self.signals.status_updated.emit(contact_id, status, found)
        finally:
            self.signals.finished.emit()
