from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable

from inbox_probe.actions.core import Action, ActionType
from inbox_probe.actions.handlers import (
    ActionHandler,
    AddLabelHandler,
    ArchiveHandler,
    MarkReadHandler,
    MarkUnreadHandler,
    RemoveLabelHandler,
)
from inbox_probe.gmail.client import GmailClient

logger = logging.getLogger(__name__)


@dataclass
class ActionExecutor:
    handlers: Dict[ActionType, ActionHandler]
    dry_run: bool = False
    continue_on_error: bool = True

    def run(self, client: GmailClient, actions: Iterable[Action]) -> int:
        """Run actions in order and return how many were applied."""
        applied = 0
        for action in actions:
            handler = self.handlers.get(action.type)
            if not handler:
                logger.warning("No handler registered for action type: %s", action.type)
                continue

            if self.dry_run:
                logger.info(
                    "[DRY-RUN] would run type=%s message_id=%s label=%s reason=%s",
                    action.type.value,
                    action.message_id,
                    action.label_name,
                    action.reason,
                )
                continue

            try:
                handler.handle(client, action)
                applied += 1
            except Exception as e:
                logger.error(
                    "Action failed type=%s message_id=%s reason=%s err=%s",
                    action.type.value,
                    action.message_id,
                    action.reason,
                    e,
                )
                if not self.continue_on_error:
                    raise
        return applied


def default_executor(*, dry_run: bool = False, continue_on_error: bool = True) -> ActionExecutor:
    return ActionExecutor(
        handlers={
            ActionType.MARK_READ: MarkReadHandler(),
            ActionType.MARK_UNREAD: MarkUnreadHandler(),
            ActionType.ARCHIVE: ArchiveHandler(),
            ActionType.ADD_LABEL: AddLabelHandler(),
            ActionType.REMOVE_LABEL: RemoveLabelHandler(),
        },
        dry_run=dry_run,
        continue_on_error=continue_on_error,
    )
