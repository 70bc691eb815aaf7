"""Bounded retry and reconnect loops.

run_with_retry() re-issues one remote call on the same connection while the
failure is transient. Transport and session failures leave the loop right
away: they need a new connection, which is reconnect_with_policy()'s job.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, TypeVar

import sentry_sdk
import structlog

from graph_session.core.classify import Outcome, classify
from graph_session.core.exceptions import (
    ReconnectExhaustedError,
    SessionInvalidError,
    TransportError,
)
from graph_session.core.models import ExecutionResponse

if TYPE_CHECKING:
    from graph_session.core.config import ReconnectPolicy, RetryPolicy

T = TypeVar("T")


class ReconnectState(StrEnum):
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


def raise_for_outcome(
    outcome: Outcome, error: BaseException | None, response: object
) -> None:
    """Turn a non-success outcome into the matching exception.

    Server-reported query errors are returned as data, so a QUERY_ERROR
    carried only by the response does not raise.
    """
    if outcome is Outcome.TRANSPORT_FAILURE:
        if isinstance(error, TransportError):
            raise error
        raise TransportError(f"Transport failure: {error}") from error
    if outcome is Outcome.SESSION_INVALID:
        if isinstance(error, SessionInvalidError):
            raise error
        if isinstance(response, ExecutionResponse):
            detail = response.error_msg or response.error_code
            msg = f"Session rejected by server: {detail}"
            raise SessionInvalidError(msg, error_code=response.error_code)
    if error is not None:
        raise error


def run_with_retry(call: Callable[[], T], policy: RetryPolicy) -> T:
    """Invoke ``call`` up to ``policy.max_attempts`` times.

    Only RETRYABLE failures loop; every other outcome returns or raises on
    the attempt that produced it.
    """
    log = structlog.get_logger()
    attempt = 0
    while True:
        attempt += 1
        error: BaseException | None = None
        response: T | None = None
        try:
            response = call()
        except Exception as e:
            error = e

        outcome = classify(error, response)
        if outcome is not Outcome.RETRYABLE or attempt >= policy.max_attempts:
            raise_for_outcome(outcome, error, response)
            return response  # type: ignore[return-value]

        log.error("start retry", attempt=attempt, error=str(error))
        if policy.idle_time > 0:
            with sentry_sdk.start_span(
                op="sleep", description=f"Retry wait {policy.idle_time}s"
            ):
                time.sleep(policy.idle_time)


def reconnect_with_policy(repair: Callable[[], None], policy: ReconnectPolicy) -> None:
    """Call ``repair`` until it succeeds or the policy's budget runs out.

    Raises ReconnectExhaustedError chained to the last repair failure.
    """
    log = structlog.get_logger()
    state = ReconnectState.RECONNECTING
    attempts = 0
    started = time.monotonic()

    with sentry_sdk.start_span(
        op="graph.reconnect", description="Reconnect session"
    ) as span:
        while state is ReconnectState.RECONNECTING:
            try:
                repair()
            except Exception as e:
                attempts += 1
                log.error("failed to reconnect", attempt=attempts, error=str(e))
                elapsed = time.monotonic() - started
                if policy.max_duration and elapsed >= policy.max_duration:
                    state = ReconnectState.FAILED
                elif policy.max_attempts and attempts >= policy.max_attempts:
                    state = ReconnectState.FAILED
                if state is ReconnectState.FAILED:
                    span.set_status("unavailable")
                    span.set_data("attempts", attempts)
                    msg = (
                        f"Graph service unavailable: reconnect failed after "
                        f"{attempts} attempt(s) in {elapsed:.1f}s"
                    )
                    raise ReconnectExhaustedError(msg) from e
                if policy.idle_time > 0:
                    with sentry_sdk.start_span(
                        op="sleep", description=f"Reconnect wait {policy.idle_time}s"
                    ):
                        time.sleep(policy.idle_time)
            else:
                state = ReconnectState.CONNECTED

        span.set_data("attempts", attempts + 1)
