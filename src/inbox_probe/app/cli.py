from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

from inbox_probe.actions.core import Action, ActionType
from inbox_probe.actions.executor import default_executor
from inbox_probe.app import inbox
from inbox_probe.gmail.client import GmailClient
from inbox_probe.models import Email

ClientFactory = Callable[..., GmailClient]


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inbox-probe",
        description="Wait for, list and modify Gmail messages from test suites.",
    )
    parser.add_argument("--credentials", type=Path, help="OAuth client credentials JSON.")
    parser.add_argument("--token", type=Path, help="Cached Gmail token JSON.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Authorize the mailbox and store the token.")

    check = sub.add_parser("check", help="Poll until a matching message arrives.")
    check.add_argument("--from", dest="from_", default="", help="Sender substring.")
    check.add_argument("--to", dest="to", default="", help="Recipient substring.")
    check.add_argument("--subject", default="", help="Subject substring.")
    check.add_argument("--wait", dest="wait_time_sec", type=_positive_float, default=None)
    check.add_argument("--max-wait", dest="max_wait_time_sec", type=float, default=None)
    check.add_argument("--label", default="INBOX")
    check.add_argument("--no-body", dest="include_body", action="store_false")
    check.add_argument("--json", dest="as_json", action="store_true")

    listing = sub.add_parser("list", help="Print the most recent messages.")
    listing.add_argument("--label", default="INBOX")
    listing.add_argument("--max-results", type=int, default=10)
    listing.add_argument("--no-body", dest="include_body", action="store_false")
    listing.add_argument("--json", dest="as_json", action="store_true")

    modify = sub.add_parser("modify", help="Change labels of one message.")
    modify.add_argument("message_id")
    modify.add_argument("--add", action="append", default=[], metavar="LABEL")
    modify.add_argument("--remove", action="append", default=[], metavar="LABEL")
    modify.add_argument("--mark-read", action="store_true")
    modify.add_argument("--archive", action="store_true")
    modify.add_argument("--dry-run", action="store_true")

    return parser


def _print_email(email: Email, as_json: bool) -> None:
    if as_json:
        print(json.dumps(email.to_dict(), indent=2, ensure_ascii=False))
        return
    print(f"{email.message_id}  From: {email.from_}  To: {email.receiver}  Subject: {email.subject}")


def _modify_actions(args: argparse.Namespace) -> List[Action]:
    actions = [
        Action(type=ActionType.ADD_LABEL, message_id=args.message_id, label_name=label)
        for label in args.add
    ]
    actions += [
        Action(type=ActionType.REMOVE_LABEL, message_id=args.message_id, label_name=label)
        for label in args.remove
    ]
    if args.mark_read:
        actions.append(Action(type=ActionType.MARK_READ, message_id=args.message_id))
    if args.archive:
        actions.append(Action(type=ActionType.ARCHIVE, message_id=args.message_id))
    return actions


def main(argv: Optional[List[str]] = None, client_factory: ClientFactory = inbox.connect_client) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    actions: List[Action] = []
    if args.command == "modify":
        actions = _modify_actions(args)
        if not actions:
            parser.error("modify needs at least one of --add, --remove, --mark-read, --archive")

    client = client_factory(
        args.credentials,
        args.token,
        interactive=args.command == "init",
    )

    if args.command == "init":
        profile = client.get_profile()
        print(f"Connected as: {profile.get('emailAddress')}")
        return 0

    if args.command == "check":
        found = inbox.check_inbox(
            client,
            subject=args.subject,
            from_=args.from_,
            to=args.to,
            wait_time_sec=args.wait_time_sec,
            max_wait_time_sec=args.max_wait_time_sec,
            label=args.label,
            include_body=args.include_body,
        )
        if found is None:
            return 1
        _print_email(found, args.as_json)
        return 0

    if args.command == "list":
        emails = inbox.get_messages(
            client,
            label=args.label,
            include_body=args.include_body,
            max_results=args.max_results,
        )
        if args.as_json:
            print(json.dumps([e.to_dict() for e in emails], indent=2, ensure_ascii=False))
        else:
            for email in emails:
                _print_email(email, as_json=False)
        return 0

    executor = default_executor(dry_run=args.dry_run, continue_on_error=False)
    executor.run(client, actions)
    return 0


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
