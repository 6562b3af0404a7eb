from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from inbox_probe.actions.core import Action
from inbox_probe.app import inbox
from inbox_probe.gmail.client import GmailClient

logger = logging.getLogger(__name__)


class ActionHandler(ABC):
    @abstractmethod
    def handle(self, client: GmailClient, action: Action) -> None:
        """Execute one action."""
        ...


class MarkReadHandler(ActionHandler):
    def handle(self, client: GmailClient, action: Action) -> None:
        inbox.mark_as_read(client, action.message_id)
        logger.info("[READ] message_id=%s reason=%s", action.message_id, action.reason)


class MarkUnreadHandler(ActionHandler):
    def handle(self, client: GmailClient, action: Action) -> None:
        inbox.mark_as_unread(client, action.message_id)
        logger.info("[UNREAD] message_id=%s reason=%s", action.message_id, action.reason)


class ArchiveHandler(ActionHandler):
    def handle(self, client: GmailClient, action: Action) -> None:
        inbox.archive(client, action.message_id)
        logger.info("[ARCHIVE] message_id=%s reason=%s", action.message_id, action.reason)


class AddLabelHandler(ActionHandler):
    def handle(self, client: GmailClient, action: Action) -> None:
        if not action.label_name:
            raise ValueError("ADD_LABEL requires label_name")

        inbox.modify_message(client, action.message_id, add_labels=[action.label_name])
        logger.info(
            "[LABEL] message_id=%s label=%s reason=%s",
            action.message_id,
            action.label_name,
            action.reason,
        )


class RemoveLabelHandler(ActionHandler):
    def handle(self, client: GmailClient, action: Action) -> None:
        if not action.label_name:
            raise ValueError("REMOVE_LABEL requires label_name")

        inbox.modify_message(client, action.message_id, remove_labels=[action.label_name])
        logger.info(
            "[UNLABEL] message_id=%s label=%s reason=%s",
            action.message_id,
            action.label_name,
            action.reason,
        )
