from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class EmailBody:
    html: str = ""
    text: str = ""


@dataclass(frozen=True)
class Email:
    message_id: str
    from_: str
    receiver: str
    subject: str
    body: Optional[EmailBody] = None
    thread_id: Optional[str] = None
    snippet: str = ""
    internal_date_ms: int = 0
    label_ids: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        # Keys follow the header names callers filter on.
        data = {
            "id": self.message_id,
            "thread_id": self.thread_id,
            "from": self.from_,
            "to": self.receiver,
            "subject": self.subject,
            "snippet": self.snippet,
            "internal_date_ms": self.internal_date_ms,
            "label_ids": list(self.label_ids),
        }
        if self.body is not None:
            data["body"] = {"html": self.body.html, "text": self.body.text}
        return data


@dataclass(frozen=True)
class MessageCriteria:
    """Substring predicates an email must satisfy. Empty values match anything."""
    from_: str = ""
    to: str = ""
    subject: str = ""
