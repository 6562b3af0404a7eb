from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httplib2
import pytest
from googleapiclient.errors import HttpError

from inbox_probe.gmail.client import GmailClient, GmailClientConfig


def make_http_error(status: int) -> HttpError:
    return HttpError(httplib2.Response({"status": status}), b"")


def encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


def make_message(
    message_id: str,
    *,
    sender: str = "",
    to: str = "",
    subject: str = "",
    text: Optional[str] = None,
    html: Optional[str] = None,
    label_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    headers = [
        {"name": "From", "value": sender},
        {"name": "To", "value": to},
        {"name": "Subject", "value": subject},
    ]
    parts = []
    if text is not None:
        parts.append({"mimeType": "text/plain", "body": {"size": len(text), "data": encode(text)}})
    if html is not None:
        parts.append({"mimeType": "text/html", "body": {"size": len(html), "data": encode(html)}})
    return {
        "id": message_id,
        "threadId": f"thread-{message_id}",
        "snippet": subject,
        "internalDate": "1700000000000",
        "labelIds": label_ids if label_ids is not None else ["INBOX", "UNREAD"],
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": headers,
            "body": {"size": 0},
            "parts": parts,
        },
    }


class _Call:
    def __init__(self, result: Any):
        self._result = result

    def execute(self) -> Any:
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeMessages:
    def __init__(self, service: "FakeGmailService"):
        self._service = service

    def list(self, **kwargs: Any) -> _Call:
        self._service.list_calls.append(kwargs)
        if self._service.list_results:
            result = self._service.list_results.pop(0)
        else:
            result = [m["id"] for m in self._service.messages]
        if isinstance(result, Exception):
            return _Call(result)
        return _Call({"messages": [{"id": mid} for mid in result]})

    def get(self, userId: str, id: str, format: str) -> _Call:
        self._service.get_calls.append(id)
        for msg in self._service.messages:
            if msg["id"] == id:
                return _Call(msg)
        return _Call(self._service.missing_error(id))

    def modify(self, userId: str, id: str, body: Dict[str, Any]) -> _Call:
        self._service.modify_calls.append((id, body))
        return _Call({"id": id, "labelIds": body["addLabelIds"]})


class FakeLabels:
    def __init__(self, service: "FakeGmailService"):
        self._service = service

    def list(self, userId: str) -> _Call:
        self._service.label_list_calls += 1
        return _Call({"labels": self._service.labels})


class FakeUsers:
    def __init__(self, service: "FakeGmailService"):
        self._service = service

    def messages(self) -> FakeMessages:
        return FakeMessages(self._service)

    def labels(self) -> FakeLabels:
        return FakeLabels(self._service)

    def getProfile(self, userId: str) -> _Call:
        return _Call({"emailAddress": "qa@example.com"})


class FakeGmailService:
    """Emulates the discovery client call chain: users().messages().list(...).execute()."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, Any]] = []
        # Queue of id lists (or exceptions) returned by successive list() calls.
        self.list_results: List[Any] = []
        self.labels: List[Dict[str, Any]] = [
            {"id": "INBOX", "name": "INBOX", "type": "system"},
            {"id": "Label_7", "name": "Receipts", "type": "user"},
        ]
        self.list_calls: List[Dict[str, Any]] = []
        self.get_calls: List[str] = []
        self.modify_calls: List[Any] = []
        self.label_list_calls = 0

    def missing_error(self, message_id: str) -> HttpError:
        return make_http_error(404)

    def users(self) -> FakeUsers:
        return FakeUsers(self)


@pytest.fixture
def fake_service() -> FakeGmailService:
    return FakeGmailService()


@pytest.fixture
def client(fake_service: FakeGmailService, tmp_path: Path) -> GmailClient:
    cfg = GmailClientConfig(
        credentials_path=tmp_path / "credentials.json",
        token_path=tmp_path / "gmail_token.json",
    )
    return GmailClient(cfg, service=fake_service)


@pytest.fixture
def message_factory() -> Callable[..., Dict[str, Any]]:
    return make_message


@pytest.fixture
def http_error() -> Callable[[int], HttpError]:
    return make_http_error
