"""Deferred commands and the bus that serialises their results.

Commands run on worker threads and never touch the console model. Their only
output is a single :class:`~shadowpay.ui.messages.Message` posted to the
:class:`MessageBus`, which the update loop drains one message at a time.
"""

from __future__ import annotations

import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..utils import logbook
from .messages import MESSAGE_TYPES, Loading, Message, Success, error_from

DEFAULT_WORKERS = 4

CommandBody = Callable[[], object]


@dataclass(frozen=True)
class Command:
    """A unit of deferred work producing exactly one message.

    ``label`` names the work for the progress indicator; unlabelled commands
    resolve without one.
    """

    body: CommandBody
    label: Optional[str] = None

    @classmethod
    def resolved(cls, message: Message) -> "Command":
        """Return a command whose result is already known."""

        return cls(body=lambda: message)

    def run(self) -> Message:
        """Execute the body once and coerce its outcome into a message."""

        try:
            result = self.body()
        except Exception as exc:
            logbook.get_logger().exception("command %r failed", self.label or "<unlabelled>")
            return error_from(exc)
        if isinstance(result, MESSAGE_TYPES):
            return result
        return Success("" if result is None else str(result))


class MessageBus:
    """FIFO channel with many producers and a single consumer."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Message]" = queue.Queue()

    def post(self, message: Message) -> None:
        self._queue.put(message)

    def get(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Return the next message, or ``None`` when ``timeout`` expires."""

        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[Message]:
        """Return every queued message without blocking, oldest first."""

        pending: List[Message] = []
        while True:
            try:
                pending.append(self._queue.get_nowait())
            except queue.Empty:
                return pending

    def empty(self) -> bool:
        return self._queue.empty()


class CommandScheduler:
    """Run commands off the update loop and post their results to ``bus``."""

    def __init__(self, bus: MessageBus, *, max_workers: int = DEFAULT_WORKERS) -> None:
        self.bus = bus
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="shadowpay-command"
        )

    def schedule(self, command: Command) -> "Future[None]":
        """Start ``command`` without waiting; its message lands on the bus."""

        if command.label:
            self.bus.post(Loading(command.label))
        return self._executor.submit(self._execute, command)

    def _execute(self, command: Command) -> None:
        self.bus.post(command.run())

    def shutdown(self, *, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


__all__ = ["Command", "CommandScheduler", "MessageBus"]
