# models.py
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Status(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"


SUBJECT_DISPLAY_NAMES = {
    "web-development": "Web Development Project",
    "consultation": "Consultation",
    "collaboration": "Collaboration",
    "other": "Other",
}

STRING_KEYS = ("firstName", "lastName", "email", "subject", "message", "timestamp")
OPTIONAL_KEYS = ("phone", "company", "updatedAt")
KNOWN_KEYS = ("id", "status") + STRING_KEYS + OPTIONAL_KEYS


def subject_display_name(subject: str) -> str:
    return SUBJECT_DISPLAY_NAMES.get(subject, subject)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z, e.g. 2026-10-17T09:30:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ContactRecord:
    id: int
    first_name: str
    last_name: str
    email: str
    subject: str
    message: str
    timestamp: str
    phone: Optional[str] = None
    company: Optional[str] = None
    status: Status = Status.NEW
    updated_at: Optional[str] = None  # set on every status change
    # keys found in storage that this model does not know, written back untouched
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        """Stored JSON shape: camelCase keys; optionals only when set (an empty string counts as set)."""
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "timestamp": self.timestamp,
            "status": self.status.value,
        })
        if self.phone is not None:
            data["phone"] = self.phone
        if self.company is not None:
            data["company"] = self.company
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ContactRecord":
        if not isinstance(data, dict):
            raise ValueError(f"Contact entry must be an object, got {type(data).__name__}")
        missing = [k for k in ("id",) + STRING_KEYS if k not in data]
        if missing:
            raise ValueError(f"Contact entry missing keys: {', '.join(missing)}")
        if not isinstance(data["id"], int) or isinstance(data["id"], bool):
            raise ValueError(f"Contact id must be an integer, got {data['id']!r}")
        for key in STRING_KEYS:
            if not isinstance(data[key], str):
                raise ValueError(f"Contact {key} must be a string, got {data[key]!r}")
        for key in OPTIONAL_KEYS:
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"Contact {key} must be a string, got {data[key]!r}")
        return ContactRecord(
            id=data["id"],
            first_name=data["firstName"],
            last_name=data["lastName"],
            email=data["email"],
            subject=data["subject"],
            message=data["message"],
            timestamp=data["timestamp"],
            phone=data.get("phone"),
            company=data.get("company"),
            status=Status(data.get("status", Status.NEW.value)),
            updated_at=data.get("updatedAt"),
            extra={k: v for k, v in data.items() if k not in KNOWN_KEYS},
        )
