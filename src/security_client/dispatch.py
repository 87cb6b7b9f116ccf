"""Request execution core shared by the sync and async security clients.

A dispatch turns a request value into a :class:`~security_client.transport.WireCall`
with a converter, hands it to a transport, and resolves the raw response into a
result using the operation's parser and its ignorable-status policy. The same
resolution step backs the blocking, thread-pool and asyncio entry points, so the
three report identical outcomes for identical inputs.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

import httpx

from .errors import (
    ClientTimeoutError,
    RequestBuildError,
    RequestCancelledError,
    RequestDetails,
    ResponseParseError,
    SecurityClientError,
    TransportError,
    classify_api_error,
)
from .hooks import HookRegistry
from .parsing import decode_body, error_payload, extract_reason, model_name, sample_payload
from .protocols import AsyncWireTransport, SyncWireTransport
from .transport import RawResponse, WireCall

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")
T = TypeVar("T")

Converter = Callable[[RequestT], WireCall]
Parser = Callable[[Any], ResultT]
Absent = Callable[[RequestT], ResultT]
StatusClass = Literal["success", "ignored", "failure"]


@dataclass(frozen=True, slots=True)
class StatusPolicy:
    """Which non-2xx statuses an operation accepts as a valid, absent result."""

    ignorable: frozenset[int] = frozenset()

    @classmethod
    def of(cls, statuses: StatusPolicy | Iterable[int] | None) -> StatusPolicy:
        if isinstance(statuses, StatusPolicy):
            return statuses
        return cls(frozenset(int(status) for status in statuses or ()))

    def classify(self, status_code: int) -> StatusClass:
        if 200 <= status_code < 300:
            return "success"
        if status_code in self.ignorable:
            return "ignored"
        return "failure"


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Terminal value of one dispatch: a result or an error, never both."""

    result: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, result: T) -> Outcome[T]:
        return cls(result=result)

    @classmethod
    def failure(cls, error: Exception) -> Outcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.result  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class Operation(Generic[RequestT, ResultT]):
    """A converter/parser/ignorable-set binding for one endpoint."""

    name: str
    converter: Converter[RequestT]
    parser: Parser[ResultT]
    ignorable_statuses: frozenset[int] = frozenset()
    absent: Absent[RequestT, ResultT] | None = None


CompletionCallback = Callable[[Outcome[Any]], None]


class CompletionLatch:
    """Delivers an outcome to a callback at most once, across threads."""

    def __init__(self, callback: CompletionCallback | None) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def deliver(self, outcome: Outcome[Any]) -> Outcome[Any]:
        with self._lock:
            if self._fired:
                logger.debug("dropping duplicate completion signal")
                return outcome
            self._fired = True

        if self._callback is not None:
            try:
                self._callback(outcome)
            except Exception:
                logger.exception("completion callback raised")
        return outcome


def _converter_name(converter: Callable[..., Any]) -> str:
    return getattr(converter, "__name__", None) or "request"


def build_call(request: Any, converter: Converter[Any]) -> WireCall:
    try:
        call = converter(request)
    except RequestBuildError:
        raise
    except Exception as error:
        name = _converter_name(converter)
        raise RequestBuildError(f"{name} could not build a request: {error}", operation=name) from error

    if not isinstance(call, WireCall):
        name = _converter_name(converter)
        raise RequestBuildError(
            f"{name} returned {type(call).__name__}, expected WireCall",
            operation=name,
        )
    return call


def resolve_response(
    call: WireCall,
    response: RawResponse,
    request: Any,
    parser: Parser[Any],
    policy: StatusPolicy,
    absent: Absent[Any, Any] | None,
) -> Any:
    status = response.status_code
    verdict = policy.classify(status)
    logger.debug("%s %s %s -> %s (%s)", call.operation, call.method, call.path, status, verdict)

    if verdict == "ignored":
        return absent(request) if absent is not None else None

    if verdict == "failure":
        payload = error_payload(response)
        details = RequestDetails(
            operation=call.operation,
            method=call.method,
            path=call.path,
            status_code=status,
            reason=extract_reason(payload),
            response_body=payload,
        )
        raise classify_api_error(details)

    try:
        payload = decode_body(response)
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise ResponseParseError(
            operation=call.operation,
            model_name="json",
            errors=str(error),
            status_code=status,
            raw_sample=sample_payload(response.body),
        ) from error

    try:
        return parser(payload)
    except ResponseParseError as error:
        error.operation = call.operation
        error.status_code = status
        raise
    except SecurityClientError:
        raise
    except Exception as error:
        raise ResponseParseError(
            operation=call.operation,
            model_name=model_name(parser),
            errors=str(error),
            status_code=status,
            raw_sample=sample_payload(payload),
        ) from error


def _timeout_error(call: WireCall, timeout_seconds: float | None, error: BaseException) -> ClientTimeoutError:
    if timeout_seconds is None:
        return ClientTimeoutError(str(error) or f"{call.operation} timed out")
    return ClientTimeoutError(f"{call.operation} did not complete within {timeout_seconds:.2f}s")


class Dispatcher:
    """Blocking dispatch core with a thread-pool backed non-blocking variant."""

    def __init__(
        self,
        transport: SyncWireTransport,
        *,
        hooks: HookRegistry | None = None,
        executor: Executor | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._transport = transport
        self._hooks = hooks or HookRegistry()
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max_workers
        self._executor_lock = threading.Lock()

    def execute(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
    ) -> ResultT:
        policy = StatusPolicy.of(ignorable_statuses)
        call = build_call(request, converter)
        return self._perform(call, request, parser, policy, absent)

    def dispatch(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
    ) -> Outcome[ResultT]:
        try:
            return Outcome.success(self.execute(request, converter, parser, ignorable_statuses, absent=absent))
        except SecurityClientError as error:
            return Outcome.failure(error)

    def execute_async(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> Future[Outcome[ResultT]]:
        """Submit a dispatch without blocking.

        The returned future resolves to an :class:`Outcome`; ``on_complete``
        receives the same outcome exactly once on a worker thread. Request
        build failures are delivered the same way rather than raised here.
        """
        latch = CompletionLatch(on_complete)
        pool = self._pool()
        try:
            policy = StatusPolicy.of(ignorable_statuses)
            call = build_call(request, converter)
        except Exception as error:
            if not isinstance(error, SecurityClientError):
                error = RequestBuildError(str(error), operation=_converter_name(converter))
            return pool.submit(latch.deliver, Outcome.failure(error))

        future = pool.submit(self._complete, latch, call, request, parser, policy, absent)
        future.add_done_callback(lambda done: _deliver_cancellation(latch, call, done))
        return future

    def close(self) -> None:
        with self._executor_lock:
            executor = self._executor
            if executor is not None and self._owns_executor:
                executor.shutdown(wait=False)
                self._executor = None

    def _pool(self) -> Executor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="security-client",
                )
            return self._executor

    def _complete(
        self,
        latch: CompletionLatch,
        call: WireCall,
        request: Any,
        parser: Parser[Any],
        policy: StatusPolicy,
        absent: Absent[Any, Any] | None,
    ) -> Outcome[Any]:
        try:
            outcome: Outcome[Any] = Outcome.success(self._perform(call, request, parser, policy, absent))
        except Exception as error:
            outcome = Outcome.failure(error)
        return latch.deliver(outcome)

    def _perform(
        self,
        call: WireCall,
        request: Any,
        parser: Parser[Any],
        policy: StatusPolicy,
        absent: Absent[Any, Any] | None,
    ) -> Any:
        self._hooks.run_before(call)
        try:
            response = self._send(call)
            result = resolve_response(call, response, request, parser, policy, absent)
        except SecurityClientError as error:
            self._hooks.run_error(call, error)
            raise
        self._hooks.run_after(call, result)
        return result

    def _send(self, call: WireCall) -> RawResponse:
        try:
            return self._transport.send(call)
        except (TimeoutError, httpx.TimeoutException) as error:
            raise _timeout_error(call, None, error) from error
        except (OSError, httpx.HTTPError) as error:
            raise TransportError(str(error)) from error


def _deliver_cancellation(latch: CompletionLatch, call: WireCall, done: Future[Any]) -> None:
    if done.cancelled():
        latch.deliver(Outcome.failure(RequestCancelledError(f"{call.operation} was cancelled")))


class AsyncDispatcher:
    """asyncio dispatch core."""

    def __init__(
        self,
        transport: AsyncWireTransport,
        *,
        hooks: HookRegistry | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._transport = transport
        self._hooks = hooks or HookRegistry()
        self._timeout_seconds = timeout_seconds

    async def execute(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
        timeout_seconds: float | None = None,
    ) -> ResultT:
        policy = StatusPolicy.of(ignorable_statuses)
        call = build_call(request, converter)
        return await self._perform(call, request, parser, policy, absent, self._deadline(timeout_seconds))

    async def dispatch(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
        timeout_seconds: float | None = None,
    ) -> Outcome[ResultT]:
        try:
            result = await self.execute(
                request,
                converter,
                parser,
                ignorable_statuses,
                absent=absent,
                timeout_seconds=timeout_seconds,
            )
        except SecurityClientError as error:
            return Outcome.failure(error)
        return Outcome.success(result)

    def execute_async(
        self,
        request: RequestT,
        converter: Converter[RequestT],
        parser: Parser[ResultT],
        ignorable_statuses: StatusPolicy | Iterable[int] | None = None,
        *,
        absent: Absent[RequestT, ResultT] | None = None,
        on_complete: CompletionCallback | None = None,
        timeout_seconds: float | None = None,
    ) -> asyncio.Task[Outcome[ResultT]]:
        """Schedule a dispatch on the running loop and return its task.

        Must be called from within a running event loop. ``on_complete`` is
        invoked exactly once with the outcome, including when the task is
        cancelled.
        """
        loop = asyncio.get_running_loop()
        latch = CompletionLatch(on_complete)
        try:
            policy = StatusPolicy.of(ignorable_statuses)
            call = build_call(request, converter)
        except Exception as error:
            if not isinstance(error, SecurityClientError):
                error = RequestBuildError(str(error), operation=_converter_name(converter))
            return loop.create_task(_deliver_soon(latch, Outcome.failure(error)))

        deadline = self._deadline(timeout_seconds)
        task = loop.create_task(self._complete(latch, call, request, parser, policy, absent, deadline))
        task.add_done_callback(lambda done: _deliver_task_cancellation(latch, call, done))
        return task

    def _deadline(self, timeout_seconds: float | None) -> float | None:
        return timeout_seconds if timeout_seconds is not None else self._timeout_seconds

    async def _complete(
        self,
        latch: CompletionLatch,
        call: WireCall,
        request: Any,
        parser: Parser[Any],
        policy: StatusPolicy,
        absent: Absent[Any, Any] | None,
        timeout_seconds: float | None,
    ) -> Outcome[Any]:
        try:
            result = await self._perform(call, request, parser, policy, absent, timeout_seconds)
        except asyncio.CancelledError:
            latch.deliver(Outcome.failure(RequestCancelledError(f"{call.operation} was cancelled")))
            raise
        except Exception as error:
            return latch.deliver(Outcome.failure(error))
        return latch.deliver(Outcome.success(result))

    async def _perform(
        self,
        call: WireCall,
        request: Any,
        parser: Parser[Any],
        policy: StatusPolicy,
        absent: Absent[Any, Any] | None,
        timeout_seconds: float | None,
    ) -> Any:
        await self._hooks.run_before_async(call)
        try:
            response = await self._send(call, timeout_seconds)
            result = resolve_response(call, response, request, parser, policy, absent)
        except SecurityClientError as error:
            await self._hooks.run_error_async(call, error)
            raise
        await self._hooks.run_after_async(call, result)
        return result

    async def _send(self, call: WireCall, timeout_seconds: float | None) -> RawResponse:
        try:
            if timeout_seconds is None:
                return await self._transport.send(call)
            return await asyncio.wait_for(self._transport.send(call), timeout_seconds)
        except (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException) as error:
            raise _timeout_error(call, timeout_seconds, error) from error
        except (OSError, httpx.HTTPError) as error:
            raise TransportError(str(error)) from error


async def _deliver_soon(latch: CompletionLatch, outcome: Outcome[Any]) -> Outcome[Any]:
    return latch.deliver(outcome)


def _deliver_task_cancellation(latch: CompletionLatch, call: WireCall, done: asyncio.Task[Any]) -> None:
    if done.cancelled():
        latch.deliver(Outcome.failure(RequestCancelledError(f"{call.operation} was cancelled")))
