"""
Player-count monitoring loop.

Цикл мониторинга:
- запрос статуса сервера раз в poll_interval секунд
- сравнение с последним известным числом игроков
- уведомление при изменении (кроме первого наблюдения и падения до нуля)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol

from .models import UNSET, MonitorState, ServerStatus
from .notifier import NotifyError
from .status import FetchError

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    async def fetch(self, address: str) -> ServerStatus: ...


class MessageSink(Protocol):
    async def notify(self, text: str) -> None: ...


SleepFunc = Callable[[float], Awaitable[None]]


class CycleOutcome(str, Enum):
    FETCH_FAILED = "fetch_failed"
    SERVER_DOWN = "server_down"
    MISSING_PLAYERS = "missing_players"
    BASELINE = "baseline"
    UNCHANGED = "unchanged"
    DROPPED_TO_ZERO = "dropped_to_zero"
    # decision only; run_cycle resolves it to NOTIFIED or NOTIFY_FAILED
    SHOULD_NOTIFY = "should_notify"
    NOTIFIED = "notified"
    NOTIFY_FAILED = "notify_failed"


@dataclass(frozen=True)
class Decision:
    """What to do with one status snapshot.

    ``count`` is the new last known count, or None when the snapshot is not
    an observation and state must stay as it is.
    """

    outcome: CycleOutcome
    count: Optional[int] = None
    message: Optional[str] = None


def evaluate_status(status: ServerStatus, last_known_count: Optional[int]) -> Decision:
    """Decide whether a snapshot updates state and whether to notify."""
    if not status.online:
        return Decision(CycleOutcome.SERVER_DOWN)
    if status.players is None:
        return Decision(CycleOutcome.MISSING_PLAYERS)

    count = status.players.online_count
    if count == last_known_count:
        return Decision(CycleOutcome.UNCHANGED, count)
    if last_known_count is UNSET:
        return Decision(CycleOutcome.BASELINE, count)
    if count == 0:
        return Decision(CycleOutcome.DROPPED_TO_ZERO, count)
    return Decision(CycleOutcome.SHOULD_NOTIFY, count, message=str(count))


@dataclass
class MonitorService:
    """Fetch → compare → notify → sleep, forever."""

    fetcher: StatusSource
    notifier: MessageSink
    address: str
    poll_interval: float = 60
    sleep: SleepFunc = field(default=asyncio.sleep)

    async def run_cycle(self, state: MonitorState) -> tuple[MonitorState, CycleOutcome]:
        """Run one cycle without the trailing sleep; return the next state."""
        try:
            status = await self.fetcher.fetch(self.address)
        except FetchError as e:
            logger.error("Failed to fetch status of %s: %s", self.address, e)
            return state, CycleOutcome.FETCH_FAILED

        decision = evaluate_status(status, state.last_known_count)

        if decision.outcome is CycleOutcome.SERVER_DOWN:
            logger.info("Server is down.")
            return state, decision.outcome
        if decision.outcome is CycleOutcome.MISSING_PLAYERS:
            logger.warning("Server %s reported online without player info, skipping cycle", self.address)
            return state, decision.outcome

        players = status.players
        logger.info("Players online: %s", decision.count)
        if players is not None and players.sample_names:
            logger.info("Player names: %s", players.sample_names)

        outcome = decision.outcome
        if decision.message is not None:
            try:
                await self.notifier.notify(decision.message)
                outcome = CycleOutcome.NOTIFIED
            except NotifyError as e:
                # Наблюдение всё равно засчитываем
                logger.error("Failed to send notification: %s", e)
                outcome = CycleOutcome.NOTIFY_FAILED

        return MonitorState(last_known_count=decision.count), outcome

    async def run(self, state: Optional[MonitorState] = None) -> None:
        """Poll until cancelled. Cadence is measured from cycle completion."""
        if state is None:
            state = MonitorState()
        logger.info(
            "Monitoring %s every %.0f seconds",
            self.address,
            self.poll_interval,
        )
        while True:
            try:
                state, outcome = await self.run_cycle(state)
                logger.debug("Cycle finished: %s (last known count %s)", outcome.value, state.last_known_count)
            except Exception as e:  # noqa: BLE001
                logger.exception("Unexpected error in monitor loop: %s", e)
            await self.sleep(self.poll_interval)


__all__ = ["CycleOutcome", "Decision", "MonitorService", "evaluate_status"]
