"""
Lifecycle guardian for the zombienet process.

A spawned network costs real resources until it is stopped, so the process
that owns it must stop it on every way out:

- a fault escaping the command flow (fatal fault)
- an error reported to the event loop with nobody awaiting it (unhandled async fault)
- Ctrl+C (interrupt)
- the command flow finishing (natural exit)

All four are delivered to one handler. The first one to arrive runs the
teardown; any later one waits for it and never touches the session again.
"""

import asyncio
import logging
import signal
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from .errors import TeardownError
from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


FATAL_FAULT_EXIT_CODE = 100
UNHANDLED_ASYNC_FAULT_EXIT_CODE = 1001
INTERRUPT_EXIT_CODE = 2
DEFAULT_EXIT_CODE = 2


class TerminationKind(str, Enum):
    """Which termination pathway fired."""
    FATAL_FAULT = "fatal_fault"
    UNHANDLED_ASYNC_FAULT = "unhandled_async_fault"
    INTERRUPTED = "interrupted"
    NATURAL_EXIT = "natural_exit"


@dataclass(frozen=True)
class TerminationOutcome:
    """A termination trigger together with the exit code it implies."""
    kind: TerminationKind
    exit_code: int
    error: Optional[BaseException] = None

    @property
    def orderly(self) -> bool:
        """Only a natural exit may upload logs before stopping."""
        return self.kind is TerminationKind.NATURAL_EXIT

    @classmethod
    def fatal_fault(cls, error: BaseException) -> "TerminationOutcome":
        return cls(TerminationKind.FATAL_FAULT, FATAL_FAULT_EXIT_CODE, error)

    @classmethod
    def unhandled_async_fault(cls, error: Optional[BaseException]) -> "TerminationOutcome":
        return cls(TerminationKind.UNHANDLED_ASYNC_FAULT, UNHANDLED_ASYNC_FAULT_EXIT_CODE, error)

    @classmethod
    def interrupted(cls) -> "TerminationOutcome":
        return cls(TerminationKind.INTERRUPTED, INTERRUPT_EXIT_CODE)

    @classmethod
    def natural_exit(cls, exit_code: Optional[int] = None) -> "TerminationOutcome":
        code = DEFAULT_EXIT_CODE if exit_code is None else exit_code
        return cls(TerminationKind.NATURAL_EXIT, code)


class TeardownTicket:
    """
    Single-use latch.

    consume() returns True exactly once. There is no await between the
    check and the set, so it is atomic under asyncio scheduling.
    """

    def __init__(self):
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> bool:
        if self._consumed:
            return False
        self._consumed = True
        return True


class TerminationEventSource:
    """
    Delivers runtime termination events to a single handler.

    Installs an event-loop exception handler (unhandled async faults) and
    SIGINT handling (interrupts). Fatal faults and natural exits come from
    the guardian's own supervision of the command flow.
    """

    def __init__(
        self,
        handler: Callable[[TerminationOutcome], None],
        signals: tuple[int, ...] = (signal.SIGINT,),
    ):
        self.handler = handler
        self.signals = signals
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_signals: list[int] = []
        self._previous_handlers: dict[int, Any] = {}
        self._previous_exception_handler = None

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._previous_exception_handler = loop.get_exception_handler()
        loop.set_exception_handler(self._on_loop_exception)

        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
                self._loop_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                # No loop signal support (Windows, non-main thread)
                self._previous_handlers[sig] = signal.signal(sig, self._on_raw_signal)

    def uninstall(self) -> None:
        if self._loop is None:
            return
        for sig in self._loop_signals:
            self._loop.remove_signal_handler(sig)
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._loop.set_exception_handler(self._previous_exception_handler)
        self._loop_signals = []
        self._previous_handlers = {}
        self._loop = None

    def _on_signal(self, sig: int) -> None:
        logger.debug(f"Received signal {signal.Signals(sig).name}")
        self.handler(TerminationOutcome.interrupted())

    def _on_raw_signal(self, sig: int, frame: Any) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._on_signal, sig)

    def _on_loop_exception(self, loop: asyncio.AbstractEventLoop, context: dict) -> None:
        error = context.get("exception")
        if error is None:
            loop.default_exception_handler(context)
            return
        logger.debug(f"Unhandled async fault: {context.get('message')}")
        self.handler(TerminationOutcome.unhandled_async_fault(error))


class LifecycleGuardian:
    """
    Guarantees the active session is torn down exactly once before exit.

    Usage:
        guardian = LifecycleGuardian(registry)
        exit_code = guardian.run(dispatcher.dispatch(args))

    The command flow sets `exit_code` for the natural-exit path, the same
    way a test runner sets a process exit code.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        event_source_factory: Callable[..., TerminationEventSource] = TerminationEventSource,
    ):
        self.registry = registry
        self.exit_code: Optional[int] = None
        self._event_source_factory = event_source_factory
        self._ticket = TeardownTicket()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._exit: Optional[asyncio.Future] = None
        self._teardown_done: Optional[asyncio.Event] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def exited(self) -> bool:
        return self._exit is not None and self._exit.done()

    @property
    def teardown_started(self) -> bool:
        return self._ticket.consumed

    # ------------------------------------------------------------------
    # Termination handling
    # ------------------------------------------------------------------

    def trigger(self, outcome: TerminationOutcome) -> None:
        """Event source callback: schedule termination for `outcome`."""
        if self._loop is None:
            raise RuntimeError("LifecycleGuardian.trigger() called outside run()")
        task = self._loop.create_task(self.terminate(outcome))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def terminate(self, outcome: TerminationOutcome) -> None:
        """
        Tear down (first trigger only) and request exit with the outcome's code.
        """
        self._report(outcome)

        if self._ticket.consume():
            try:
                await self._teardown(outcome)
            finally:
                self._teardown_event().set()
        else:
            logger.debug(f"Teardown already in progress, {outcome.kind.value} waits for it")
            await self._teardown_event().wait()

        self._request_exit(outcome.exit_code)

    def abort(self, exit_code: Optional[int] = None) -> None:
        """
        Exit without teardown. Only for failures before any session exists.

        Without an explicit code the exit code set so far is used, falling
        back to the natural-exit default.
        """
        if exit_code is None:
            exit_code = DEFAULT_EXIT_CODE if self.exit_code is None else self.exit_code
        self._request_exit(exit_code)

    async def _teardown(self, outcome: TerminationOutcome) -> None:
        session = self.registry.get()
        if session is None:
            return

        logger.debug(f"removing namespace: {session.namespace}")
        if outcome.orderly:
            try:
                await session.upload_logs()
            except Exception as e:
                # Logs are best-effort, the network is stopped regardless
                self._report_teardown_failure(session.namespace, e)

        try:
            await session.stop()
        except Exception as e:
            self._report_teardown_failure(session.namespace, e)
            return

        self.registry.clear()

    def _report_teardown_failure(self, namespace: str, cause: Exception) -> None:
        failure = TeardownError(namespace, cause)
        logger.error(str(failure), exc_info=cause)
        print(f"  ⚠ {failure}")

    def _report(self, outcome: TerminationOutcome) -> None:
        if outcome.error is not None:
            error = outcome.error
            print(outcome.kind.value)
            print(repr(error))
            traceback.print_exception(type(error), error, error.__traceback__)
            logger.debug(f"{outcome.kind.value}: {error!r}")
        elif outcome.kind is TerminationKind.INTERRUPTED:
            logger.info("Interrupted, shutting down")
        else:
            logger.debug(f"Natural exit with code {outcome.exit_code}")

    def _request_exit(self, exit_code: int) -> None:
        if self._exit is None or self._exit.done():
            return
        self._exit.set_result(exit_code)

    def _teardown_event(self) -> asyncio.Event:
        if self._teardown_done is None:
            self._teardown_done = asyncio.Event()
        return self._teardown_done

    # ------------------------------------------------------------------
    # Process driver
    # ------------------------------------------------------------------

    async def _supervise(self, main: Awaitable[Any]) -> None:
        try:
            await main
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await self.terminate(TerminationOutcome.fatal_fault(e))
        else:
            await self.terminate(TerminationOutcome.natural_exit(self.exit_code))

    def run(self, main: Awaitable[Any]) -> int:
        """
        Run the command flow on a fresh event loop under guard.

        Returns:
            The exit code chosen by the first termination to request exit.
        """
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._exit = loop.create_future()

        source = self._event_source_factory(self.trigger)
        source.install(loop)
        try:
            supervisor = loop.create_task(self._supervise(main))
            self._tasks.add(supervisor)
            supervisor.add_done_callback(self._tasks.discard)
            return loop.run_until_complete(self._exit)
        finally:
            source.uninstall()
            try:
                _cancel_all_tasks(loop)
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                asyncio.set_event_loop(None)
                loop.close()
                self._loop = None


def _cancel_all_tasks(loop: asyncio.AbstractEventLoop) -> None:
    pending = asyncio.all_tasks(loop)
    if not pending:
        return
    for task in pending:
        task.cancel()
    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
