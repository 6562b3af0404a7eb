from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from googleapiclient.errors import HttpError

from inbox_probe.models import Email, MessageCriteria
from inbox_probe.pipeline.matching import find_first

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollSettings:
    wait_time_sec: float = 30
    max_wait_time_sec: float = 60

    def __post_init__(self) -> None:
        if self.wait_time_sec <= 0:
            raise ValueError(f"wait_time_sec must be positive, got {self.wait_time_sec}")
        if self.max_wait_time_sec < 0:
            raise ValueError(
                f"max_wait_time_sec must not be negative, got {self.max_wait_time_sec}"
            )


def poll_until_found(
    fetch: Callable[[], List[Email]],
    criteria: MessageCriteria,
    settings: PollSettings,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[Email]:
    """
    Fetch recent emails at a fixed interval until one matches ``criteria``.

    At least one attempt is always made. After a miss the loop gives up once
    another wait would reach ``max_wait_time_sec`` of wall-clock time since
    the first attempt; otherwise it sleeps ``wait_time_sec`` and retries.

    Returns the first matching email, or None when time ran out.
    """
    started = clock()
    attempt = 0

    while True:
        attempt += 1
        try:
            found = find_first(fetch(), criteria)
        except HttpError as exc:
            # Transient API failures count as a miss for this attempt.
            logger.warning("[gmail] Error on attempt %d: %s", attempt, exc)
            found = None

        if found is not None:
            logger.info("[gmail] Message found on attempt %d: id=%s", attempt, found.message_id)
            return found

        elapsed = clock() - started
        if elapsed + settings.wait_time_sec >= settings.max_wait_time_sec:
            logger.info("[gmail] Maximum waiting time exceeded after %d attempt(s)!", attempt)
            return None

        logger.info("[gmail] Message not found. Waiting %s seconds...", settings.wait_time_sec)
        sleep(settings.wait_time_sec)
