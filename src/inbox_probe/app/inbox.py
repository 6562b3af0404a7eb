from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from googleapiclient.errors import HttpError

from inbox_probe.config import paths
from inbox_probe.gmail.client import GmailClient, GmailClientConfig
from inbox_probe.models import Email, MessageCriteria
from inbox_probe.parsing.parser import normalize_message
from inbox_probe.pipeline.matching import build_query, filter_emails
from inbox_probe.pipeline.polling import PollSettings, poll_until_found

logger = logging.getLogger(__name__)


def load_gmail_config(
    credentials_path: Optional[Path] = None,
    token_path: Optional[Path] = None,
) -> GmailClientConfig:
    cred = paths.credentials_path(credentials_path)
    if not cred.exists():
        raise RuntimeError(
            f"Missing Gmail credentials at {cred}. "
            "Did you configure INBOX_PROBE_SECRETS_DIR?"
        )

    return GmailClientConfig(
        credentials_path=cred,
        token_path=paths.token_path(token_path),
        user_id="me",
    )


def connect_client(
    credentials_path: Optional[Path] = None,
    token_path: Optional[Path] = None,
    *,
    interactive: bool = False,
) -> GmailClient:
    client = GmailClient(load_gmail_config(credentials_path, token_path))
    client.connect(interactive=interactive)
    return client


def _is_not_found(exc: HttpError) -> bool:
    return getattr(exc.resp, "status", None) == 404


def get_messages(
    client: GmailClient,
    *,
    label: Optional[str] = "INBOX",
    include_body: bool = True,
    max_results: int = 10,
    after: Optional[datetime] = None,
    before: Optional[datetime] = None,
    criteria: Optional[MessageCriteria] = None,
) -> List[Email]:
    """
    Fetch and normalize the most recent messages, newest first.

    When ``criteria`` is given only matching emails are returned.
    """
    message_ids = client.list_messages(
        query=build_query(after=after, before=before),
        label_ids=[label] if label else None,
        max_results=max_results,
    )
    logger.debug("[gmail] Listed %d message(s) (label=%s)", len(message_ids), label)

    emails: List[Email] = []
    for mid in message_ids:
        try:
            msg = client.get_message(mid, fmt="full")
        except HttpError as exc:
            if not _is_not_found(exc):
                raise
            # Message deleted/moved between list and fetch.
            logger.info("[gmail] Skipping message %s, it no longer exists", mid)
            continue
        emails.append(normalize_message(msg, include_body=include_body))

    if criteria is not None:
        return filter_emails(emails, criteria)
    return emails


def check_inbox(
    client: GmailClient,
    *,
    subject: str = "",
    from_: str = "",
    to: str = "",
    wait_time_sec: Optional[float] = None,
    max_wait_time_sec: Optional[float] = None,
    label: Optional[str] = "INBOX",
    include_body: bool = True,
    max_results: int = 10,
    after: Optional[datetime] = None,
    before: Optional[datetime] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[Email]:
    """
    Wait for a message from ``from_`` to ``to`` whose subject contains ``subject``.

    Polls every ``wait_time_sec`` seconds for up to ``max_wait_time_sec``
    seconds; both default to the configured values. Returns the newest
    matching email, or None if none arrived in time.
    """
    settings = PollSettings(
        wait_time_sec=paths.default_wait_time_sec() if wait_time_sec is None else wait_time_sec,
        max_wait_time_sec=(
            paths.default_max_wait_time_sec() if max_wait_time_sec is None else max_wait_time_sec
        ),
    )
    criteria = MessageCriteria(from_=from_, to=to, subject=subject)

    logger.info(
        "[gmail] Checking for message from '%s', to: %s, contains '%s' in subject...",
        from_,
        to,
        subject,
    )

    def fetch() -> List[Email]:
        return get_messages(
            client,
            label=label,
            include_body=include_body,
            max_results=max_results,
            after=after,
            before=before,
        )

    return poll_until_found(fetch, criteria, settings, sleep=sleep, clock=clock)


def _resolve_label_ids(client: GmailClient, names: Iterable[str]) -> List[str]:
    ids: List[str] = []
    for name in names:
        label_id = client.get_label_id(name)
        if not label_id:
            raise ValueError(f"Unknown Gmail label: {name}")
        ids.append(label_id)
    return ids


def modify_message(
    client: GmailClient,
    message_id: str,
    *,
    add_labels: Iterable[str] = (),
    remove_labels: Iterable[str] = (),
) -> Dict[str, Any]:
    add_ids = _resolve_label_ids(client, add_labels)
    remove_ids = _resolve_label_ids(client, remove_labels)
    if not add_ids and not remove_ids:
        raise ValueError("modify_message needs at least one label to add or remove")

    logger.info(
        "[gmail] Modifying message '%s', add=%s remove=%s",
        message_id,
        add_ids,
        remove_ids,
    )
    return client.modify_message(message_id, add_label_ids=add_ids, remove_label_ids=remove_ids)


def mark_as_read(client: GmailClient, message_id: str) -> Dict[str, Any]:
    return modify_message(client, message_id, remove_labels=["UNREAD"])


def mark_as_unread(client: GmailClient, message_id: str) -> Dict[str, Any]:
    return modify_message(client, message_id, add_labels=["UNREAD"])


def archive(client: GmailClient, message_id: str) -> Dict[str, Any]:
    # Gmail archives by dropping the INBOX label.
    return modify_message(client, message_id, remove_labels=["INBOX"])
