from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

# Modify covers reading messages plus label changes (read/unread, archive).
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

# System label IDs are identical to their names and need no lookup.
SYSTEM_LABELS = frozenset(
    {
        "INBOX",
        "SPAM",
        "TRASH",
        "UNREAD",
        "STARRED",
        "IMPORTANT",
        "SENT",
        "DRAFT",
        "CATEGORY_PERSONAL",
        "CATEGORY_SOCIAL",
        "CATEGORY_PROMOTIONS",
        "CATEGORY_UPDATES",
        "CATEGORY_FORUMS",
    }
)


@dataclass(frozen=True)
class GmailClientConfig:
    # Path to OAuth client credentials downloaded from Google Cloud Console.
    credentials_path: Path
    # Token cache will be created here after first login.
    token_path: Path
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"


class GmailClient:
    def __init__(self, cfg: GmailClientConfig, service: Any = None):
        self._cfg = cfg
        self._creds: Optional[Credentials] = None
        self._service = service
        self._labels: Optional[List[Dict[str, Any]]] = None

    @property
    def config(self) -> GmailClientConfig:
        return self._cfg

    def connect(self, interactive: bool = True) -> None:
        """Create an authenticated Gmail API service client."""
        creds = None

        if self._cfg.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self._cfg.token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                logger.debug("Refreshing access token from %s", self._cfg.token_path)
                creds.refresh(Request())
            else:
                if not interactive:
                    raise RuntimeError(
                        f"No valid Gmail token at {self._cfg.token_path}. "
                        "Run `inbox-probe init` to authorize this mailbox."
                    )
                if not self._cfg.credentials_path.exists():
                    raise FileNotFoundError(f"Missing credentials: {self._cfg.credentials_path}")
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(self._cfg.credentials_path),
                    SCOPES,
                )
                creds = flow.run_local_server(port=0)

            # Save the credentials for the next run.
            self._cfg.token_path.parent.mkdir(parents=True, exist_ok=True)
            self._cfg.token_path.write_text(creds.to_json(), encoding="utf-8")

        self._creds = creds
        self._service = build("gmail", "v1", credentials=creds)

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailClient is not connected. Call connect() first.")
        return self._service

    def list_messages(
        self,
        query: str = "",
        label_ids: Optional[Iterable[str]] = None,
        max_results: int = 10,
    ) -> List[str]:
        """
        List message IDs matching a Gmail search query, newest first.
        Example query: 'after:1700000000 from:noreply@example.com'
        """
        params: Dict[str, Any] = {"userId": self._cfg.user_id, "maxResults": max_results}
        if query:
            params["q"] = query
        if label_ids:
            params["labelIds"] = list(label_ids)
        resp = self.service.users().messages().list(**params).execute()
        msgs = resp.get("messages", [])
        return [m["id"] for m in msgs]

    def get_message(self, message_id: str, fmt: str = "full") -> Dict[str, Any]:
        """
        Fetch a full message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        return (
            self.service.users()
            .messages()
            .get(userId=self._cfg.user_id, id=message_id, format=fmt)
            .execute()
        )

    def modify_message(
        self,
        message_id: str,
        add_label_ids: Iterable[str] = (),
        remove_label_ids: Iterable[str] = (),
    ) -> Dict[str, Any]:
        body = {
            "addLabelIds": list(add_label_ids),
            "removeLabelIds": list(remove_label_ids),
        }
        return (
            self.service.users()
            .messages()
            .modify(userId=self._cfg.user_id, id=message_id, body=body)
            .execute()
        )

    def list_labels(self, refresh: bool = False) -> List[Dict[str, Any]]:
        if self._labels is None or refresh:
            resp = self.service.users().labels().list(userId=self._cfg.user_id).execute()
            self._labels = list(resp.get("labels", []))
        return self._labels

    def get_label_id(self, name: str) -> Optional[str]:
        """Resolve a label name (or ID) to its Gmail label ID."""
        if name.upper() in SYSTEM_LABELS:
            return name.upper()
        wanted = name.lower()
        for label in self.list_labels():
            if label.get("id") == name or str(label.get("name", "")).lower() == wanted:
                return label["id"]
        return None

    def get_profile(self) -> Dict[str, Any]:
        """Get the Gmail profile of the authenticated user."""
        return self.service.users().getProfile(userId=self._cfg.user_id).execute()
