from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActionType(str, Enum):
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    ARCHIVE = "archive"
    ADD_LABEL = "add_label"
    REMOVE_LABEL = "remove_label"


@dataclass(frozen=True)
class Action:
    type: ActionType
    message_id: str
    label_name: Optional[str] = None
    reason: str = ""
