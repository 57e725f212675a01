# errors.py
from typing import List


class ContactError(Exception):
    """Base class for recoverable contact-form errors."""


class ValidationError(ContactError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class TransientServiceError(ContactError):
    """Simulated backend failure during a create. Nothing was written; retry is safe."""


class StorageUnavailable(ContactError):
    """The local key-value storage could not be read or written."""
