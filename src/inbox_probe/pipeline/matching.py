from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from inbox_probe.models import Email, MessageCriteria


def matches(email: Email, criteria: MessageCriteria) -> bool:
    # Plain case-sensitive substring checks, an empty needle always matches.
    return (
        criteria.to in email.receiver
        and criteria.subject in email.subject
        and criteria.from_ in email.from_
    )


def find_first(emails: Iterable[Email], criteria: MessageCriteria) -> Optional[Email]:
    for email in emails:
        if matches(email, criteria):
            return email
    return None


def filter_emails(emails: Iterable[Email], criteria: MessageCriteria) -> List[Email]:
    return [email for email in emails if matches(email, criteria)]


def _epoch_seconds(value: datetime) -> int:
    # Gmail "after:"/"before:" expect seconds since epoch.
    return max(0, int(value.timestamp()))


def build_query(
    after: Optional[datetime] = None,
    before: Optional[datetime] = None,
) -> str:
    parts: List[str] = []
    if after is not None:
        parts.append(f"after:{_epoch_seconds(after)}")
    if before is not None:
        parts.append(f"before:{_epoch_seconds(before)}")
    return " ".join(parts)
