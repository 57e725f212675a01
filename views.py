import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Tuple

from models import ContactRecord, subject_display_name

CSV_HEADER = "First Name,Last Name,Email,Phone,Company,Subject,Message,Status,Received,Updated"
MESSAGE_PREVIEW_LENGTH = 100

EMPTY_MESSAGE = "No contacts saved yet."
NO_MATCH_MESSAGE = "No contacts found matching your criteria."

Predicate = Callable[[ContactRecord], bool]


@dataclass
class ContactCard:
    id: int
    title: str
    badge: str
    fields: List[Tuple[str, str]] = field(default_factory=list)

    def to_text(self) -> str:
        lines = [f"{self.title} [{self.badge}]"]
        lines += [f"{label}: {value}" for label, value in self.fields]
        return "\n".join(lines)


def format_date(value: Optional[str]) -> str:
    """ISO timestamp -> local 'YYYY-MM-DD HH:MM'. Anything unparseable is returned as-is."""
    if not value:
        return ""
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


def truncate_message(text: str, limit: int = MESSAGE_PREVIEW_LENGTH) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def contact_matches(contact: ContactRecord, search_term: str = "", status: str = "") -> bool:
    term = (search_term or "").lower()
    if term:
        haystack = [contact.first_name, contact.last_name, contact.email,
                    contact.company or "", contact.message]
        if not any(term in value.lower() for value in haystack):
            return False
    if status and contact.status.value != status:
        return False
    return True


def make_filter(search_term: str = "", status: str = "") -> Predicate:
    return lambda contact: contact_matches(contact, search_term, status)


def render_card(contact: ContactRecord) -> ContactCard:
    fields = [("Email", contact.email)]
    if contact.phone:
        fields.append(("Phone", contact.phone))
    if contact.company:
        fields.append(("Company", contact.company))
    fields.append(("Subject", subject_display_name(contact.subject)))
    fields.append(("Message", truncate_message(contact.message)))
    fields.append(("Received", format_date(contact.timestamp)))
    if contact.updated_at:
        fields.append(("Updated", format_date(contact.updated_at)))
    return ContactCard(
        id=contact.id,
        title=contact.full_name,
        badge=contact.status.value.upper(),
        fields=fields,
    )


def render_contacts(contacts: Iterable[ContactRecord], predicate: Optional[Predicate] = None) -> List[ContactCard]:
    """Cards for every contact passing ``predicate`` (all of them when None), order kept."""
    return [render_card(c) for c in contacts if predicate is None or predicate(c)]


def render_empty(filtered: bool = False) -> str:
    return NO_MATCH_MESSAGE if filtered else EMPTY_MESSAGE


def export_csv(contacts: Iterable[ContactRecord]) -> str:
    buf = io.StringIO()
    buf.write(CSV_HEADER + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for c in contacts:
        writer.writerow([
            c.first_name,
            c.last_name,
            c.email,
            c.phone or "",
            c.company or "",
            subject_display_name(c.subject),
            c.message,
            c.status.value,
            format_date(c.timestamp),
            format_date(c.updated_at),
        ])
    return buf.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"portfolio_contacts_{today.isoformat()}.csv"

