from __future__ import annotations

import pytest

from inbox_probe.actions.core import Action, ActionType
from inbox_probe.actions.executor import ActionExecutor, default_executor


def test_executor_applies_actions_in_order(client, fake_service) -> None:
    actions = [
        Action(type=ActionType.MARK_READ, message_id="m1"),
        Action(type=ActionType.ADD_LABEL, message_id="m1", label_name="Receipts"),
        Action(type=ActionType.ARCHIVE, message_id="m1", reason="handled"),
    ]

    applied = default_executor().run(client, actions)

    assert applied == 3
    assert fake_service.modify_calls == [
        ("m1", {"addLabelIds": [], "removeLabelIds": ["UNREAD"]}),
        ("m1", {"addLabelIds": ["Label_7"], "removeLabelIds": []}),
        ("m1", {"addLabelIds": [], "removeLabelIds": ["INBOX"]}),
    ]


def test_dry_run_does_not_touch_the_mailbox(client, fake_service) -> None:
    applied = default_executor(dry_run=True).run(
        client, [Action(type=ActionType.MARK_UNREAD, message_id="m1")]
    )

    assert applied == 0
    assert fake_service.modify_calls == []


def test_label_actions_require_label_name(client, fake_service) -> None:
    executor = default_executor(continue_on_error=False)

    with pytest.raises(ValueError, match="REMOVE_LABEL requires label_name"):
        executor.run(client, [Action(type=ActionType.REMOVE_LABEL, message_id="m1")])


def test_failed_action_is_skipped_when_continuing(client, fake_service) -> None:
    actions = [
        Action(type=ActionType.ADD_LABEL, message_id="m1", label_name="Unknown"),
        Action(type=ActionType.MARK_READ, message_id="m1"),
    ]

    applied = default_executor().run(client, actions)

    assert applied == 1
    assert fake_service.modify_calls == [("m1", {"addLabelIds": [], "removeLabelIds": ["UNREAD"]})]


def test_unregistered_action_type_is_ignored(client, fake_service) -> None:
    executor = ActionExecutor(handlers={})

    assert executor.run(client, [Action(type=ActionType.ARCHIVE, message_id="m1")]) == 0
    assert fake_service.modify_calls == []
