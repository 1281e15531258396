"""Client-side status polling."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from sheepit.config import settings
from sheepit.models.pipeline import StatusView
from sheepit.models.project import ProjectStatus
from sheepit.utils.logging import get_logger

logger = get_logger(__name__)


class PollOutcome(str, Enum):
    LIVE = "live"
    FAILED = "failed"
    # Attempts exhausted; the deployment may still finish later.
    PENDING = "pending"


@dataclass
class PollResult:
    outcome: PollOutcome
    view: StatusView | None
    attempts: int


async def poll_until_settled(
    fetch: Callable[[], Awaitable[StatusView]],
    interval: float | None = None,
    max_attempts: int | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_update: Callable[[StatusView], None] | None = None,
) -> PollResult:
    """Fetch status until the project is live or failed, or attempts run out.

    Running out of attempts is not a failure: the outcome is ``pending``
    and a later status check resolves it.
    """
    interval = interval if interval is not None else settings.poll_interval_seconds
    max_attempts = max_attempts if max_attempts is not None else settings.poll_max_attempts

    view: StatusView | None = None
    for attempt in range(1, max_attempts + 1):
        view = await fetch()
        if on_update:
            on_update(view)

        if view.project.status == ProjectStatus.LIVE:
            return PollResult(PollOutcome.LIVE, view, attempt)
        if view.project.status == ProjectStatus.FAILED:
            return PollResult(PollOutcome.FAILED, view, attempt)

        if attempt < max_attempts:
            await sleep(interval)

    logger.info("poller.exhausted", attempts=max_attempts)
    return PollResult(PollOutcome.PENDING, view, max_attempts)
