from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, Optional

from inbox_probe.models import Email, EmailBody

logger = logging.getLogger(__name__)


def decode_data(data: str) -> str:
    # Gmail returns base64url; some producers strip the padding.
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except binascii.Error as exc:
        logger.warning("[gmail] Skipping undecodable body data: %s", exc)
        return ""
    return raw.decode("utf-8", errors="replace")


def extract_headers(payload: dict) -> Dict[str, str]:
    """Map header names to values. The first occurrence of a name wins."""
    headers: Dict[str, str] = {}
    for h in payload.get("headers", []) or []:
        name = h.get("name")
        if name and name not in headers:
            headers[name] = h.get("value", "")
    return headers


def _header(headers: Dict[str, str], name: str) -> str:
    # Case-insensitive, in payload order.
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return ""


def extract_body_from_payload(payload: dict) -> EmailBody:
    """
    Decode the HTML and plain text bodies of a Gmail message payload.

    A single-part message is routed by its MIME type (HTML goes to ``html``,
    anything else to ``text``). Multipart messages are searched depth-first
    for the first ``text/html`` and ``text/plain`` parts.
    """
    def find_part(part: dict, mime_type: str) -> Optional[str]:
        # Depth-first search through multipart payloads.
        if part.get("mimeType") == mime_type and part.get("body", {}).get("data"):
            return decode_data(part["body"]["data"])
        for child in part.get("parts", []) or []:
            found = find_part(child, mime_type)
            if found is not None:
                return found
        return None

    body = payload.get("body", {}) or {}
    if body.get("data"):
        decoded = decode_data(body["data"])
        if payload.get("mimeType") == "text/html":
            return EmailBody(html=decoded)
        return EmailBody(text=decoded)

    return EmailBody(
        html=find_part(payload, "text/html") or "",
        text=find_part(payload, "text/plain") or "",
    )


def normalize_message(msg: Dict[str, Any], include_body: bool = True) -> Email:
    payload = msg.get("payload", {}) or {}
    headers = extract_headers(payload)

    return Email(
        message_id=msg["id"],
        from_=_header(headers, "From"),
        receiver=_header(headers, "To"),
        subject=_header(headers, "Subject"),
        body=extract_body_from_payload(payload) if include_body else None,
        thread_id=msg.get("threadId"),
        snippet=msg.get("snippet", ""),
        internal_date_ms=int(msg.get("internalDate") or 0),
        label_ids=tuple(str(x) for x in (msg.get("labelIds") or [])),
    )
