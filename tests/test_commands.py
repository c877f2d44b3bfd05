"""Command execution, scheduling and message bus ordering."""

from __future__ import annotations

import threading
from concurrent.futures import wait

import pytest

from shadowpay.ui.commands import Command, CommandScheduler, MessageBus
from shadowpay.ui.messages import Error, KeyInput, Loading, Success


@pytest.fixture()
def bus() -> MessageBus:
    return MessageBus()


@pytest.fixture()
def scheduler(bus: MessageBus):
    scheduler = CommandScheduler(bus, max_workers=4)
    yield scheduler
    scheduler.shutdown(wait=True)


def test_resolved_command_returns_its_message() -> None:
    message = Error("Error: invalid amount: 'x'")
    command = Command.resolved(message)

    assert command.label is None
    assert command.run() is message


def test_run_wraps_exceptions_as_error() -> None:
    def boom() -> Success:
        raise RuntimeError("socket closed")

    result = Command(body=boom, label="Working...").run()

    assert isinstance(result, Error)
    assert "socket closed" in result.text


def test_run_wraps_plain_values_as_success() -> None:
    assert Command(body=lambda: "done").run() == Success("done")
    assert Command(body=lambda: None).run() == Success("")


def test_bus_is_fifo(bus: MessageBus) -> None:
    for key in "abc":
        bus.post(KeyInput(key))

    assert bus.get(timeout=0.1) == KeyInput("a")
    assert bus.drain() == [KeyInput("b"), KeyInput("c")]
    assert bus.empty()


def test_bus_get_times_out(bus: MessageBus) -> None:
    assert bus.get(timeout=0.01) is None


def test_labelled_command_posts_loading_before_result(
    bus: MessageBus, scheduler: CommandScheduler
) -> None:
    release = threading.Event()

    def body() -> Success:
        release.wait(timeout=5)
        return Success("finished")

    future = scheduler.schedule(Command(body=body, label="Fetching..."))
    assert bus.get(timeout=1) == Loading("Fetching...")

    release.set()
    future.result(timeout=5)
    assert bus.get(timeout=1) == Success("finished")
    assert bus.empty()


def test_unlabelled_command_posts_only_its_result(
    bus: MessageBus, scheduler: CommandScheduler
) -> None:
    future = scheduler.schedule(Command.resolved(Error("Error: bad input")))
    future.result(timeout=5)

    assert bus.drain() == [Error("Error: bad input")]


def test_each_command_produces_exactly_one_result(
    bus: MessageBus, scheduler: CommandScheduler
) -> None:
    def make(idx: int) -> Command:
        def body():
            if idx % 3 == 0:
                raise ValueError(f"failure {idx}")
            return Success(f"ok {idx}")

        return Command(body=body)

    futures = [scheduler.schedule(make(idx)) for idx in range(30)]
    wait(futures, timeout=10)

    results = bus.drain()
    assert len(results) == 30
    assert sum(isinstance(item, Error) for item in results) == 10
    assert {item.text for item in results if isinstance(item, Success)} == {
        f"ok {idx}" for idx in range(30) if idx % 3
    }


def test_failures_are_logged(bus: MessageBus, scheduler: CommandScheduler, isolated_state) -> None:
    def body():
        raise RuntimeError("kaboom")

    scheduler.schedule(Command(body=body, label="Exploding...")).result(timeout=5)

    log_text = (isolated_state / "logs" / "shadowpay.log").read_text(encoding="utf-8")
    assert "Exploding..." in log_text
    assert "kaboom" in log_text
