"""
Reconciliation wait for clusters that are provisioned asynchronously.

The ECK API accepts a create or update request and provisions the cluster in
the background. ``ReconciliationWaiter`` observes the cluster on a fixed
interval until it reports the ``Provisioned`` status, a deadline passes or the
caller cancels. It only ever reads the remote resource.
"""
import enum
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

import requests

from ..config import Config
from .errors import ECKError

logger = logging.getLogger(__name__)

PROVISIONED = "Provisioned"


@dataclass(frozen=True)
class ResourceIdentifier:
    """Addresses a cluster by its control plane and its own name."""
    control_plane: str
    name: str

    def __str__(self) -> str:
        return f"{self.control_plane}/{self.name}"


class WaitState(str, enum.Enum):
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class WaitRequest:
    """Bookkeeping for a single wait invocation."""
    identifier: ResourceIdentifier
    interval: float
    timeout: float
    state: WaitState = WaitState.POLLING
    polls: int = 0
    last_status: Optional[str] = None


@dataclass
class WaitResult:
    identifier: ResourceIdentifier
    status: str
    polls: int
    elapsed: float
    body: Dict[str, Any] = field(default_factory=dict)


class WaitError(ECKError):
    """Base exception for a failed reconciliation wait."""

    def __init__(self, message: str):
        super().__init__(message)
        self.request: Optional[WaitRequest] = None


class TransportError(WaitError):
    """The ECK API could not be reached while polling."""

    def __init__(self, identifier: ResourceIdentifier, error: Exception):
        super().__init__(f"failed to fetch status of cluster {identifier}: {error}")
        self.error = error


class BadStatusError(WaitError):
    """The ECK API answered a status poll with a non-success code."""

    def __init__(self, identifier: ResourceIdentifier, status_code: int):
        super().__init__(f"unexpected HTTP status {status_code} while polling cluster {identifier}")
        self.status_code = status_code


class DecodeError(WaitError):
    """A status response could not be parsed into a cluster status."""
    pass


class ProvisioningFailedError(WaitError):
    """The cluster reported a status listed as a definitive failure."""

    def __init__(self, identifier: ResourceIdentifier, status: str):
        super().__init__(f"cluster {identifier} reported failure status {status!r}")
        self.status = status


class WaitTimeoutError(WaitError):
    """No terminal status was observed before the deadline."""

    def __init__(self, identifier: ResourceIdentifier, timeout: float):
        super().__init__(f"timed out after {timeout:g}s waiting for cluster {identifier} to be ready")
        self.timeout = timeout


class WaitCancelledError(WaitError):
    """The caller cancelled the wait."""

    def __init__(self, identifier: ResourceIdentifier):
        super().__init__(f"wait for cluster {identifier} was cancelled")


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and a waiter."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``; True if cancelled in the meantime."""
        return self._event.wait(seconds)


class Clock:
    """Monotonic clock whose sleeps wake up early on cancellation."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, token: Optional[CancellationToken] = None) -> bool:
        if token is None:
            time.sleep(seconds)
            return False
        return token.wait(seconds)


Fetch = Callable[[str, str], requests.Response]


class ReconciliationWaiter:
    """Poll a cluster until it is provisioned.

    Args:
        fetch: callable taking (control plane, cluster name) and returning the
            HTTP response of a cluster GET, typically ``ECKClient.get_cluster``
        interval: seconds between polls, defaults to ``Config.WAIT_INTERVAL``
        timeout: overall deadline in seconds, defaults to ``Config.WAIT_TIMEOUT``
        clock: time source, replaced by a fake clock in tests
        failure_statuses: statuses that end the wait with a failure instead of
            being treated as still in progress (empty by default)
    """

    def __init__(
        self,
        fetch: Fetch,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Optional[Clock] = None,
        failure_statuses: Iterable[str] = (),
    ):
        self.fetch = fetch
        self.interval = Config.WAIT_INTERVAL if interval is None else float(interval)
        self.timeout = Config.WAIT_TIMEOUT if timeout is None else float(timeout)
        if self.interval <= 0:
            raise ValueError("poll interval must be positive")
        if self.timeout <= 0:
            raise ValueError("wait timeout must be positive")
        self.clock = clock or Clock()
        self.failure_statuses = frozenset(failure_statuses)

    def wait(self, identifier: ResourceIdentifier, cancel_token: Optional[CancellationToken] = None) -> WaitResult:
        """Block until ``identifier`` is provisioned.

        Raises:
            TransportError, BadStatusError, DecodeError, ProvisioningFailedError,
            WaitTimeoutError, WaitCancelledError: the first failure observed
        """
        request = WaitRequest(identifier=identifier, interval=self.interval, timeout=self.timeout)
        token = cancel_token or CancellationToken()
        started = self.clock.now()
        deadline = started + self.timeout

        logger.info(
            "⏳ Waiting for cluster %s to be provisioned (interval=%gs, timeout=%gs)",
            identifier, self.interval, self.timeout,
        )

        while True:
            if token.cancelled:
                raise self._finish(request, WaitState.CANCELLED, WaitCancelledError(identifier))

            remaining = deadline - self.clock.now()
            if remaining <= 0:
                raise self._finish(request, WaitState.FAILED, WaitTimeoutError(identifier, self.timeout))

            if self.clock.sleep(min(self.interval, remaining), token):
                raise self._finish(request, WaitState.CANCELLED, WaitCancelledError(identifier))

            # a tick that lands on the deadline loses to the timeout
            if self.clock.now() >= deadline:
                raise self._finish(request, WaitState.FAILED, WaitTimeoutError(identifier, self.timeout))

            status, body = self._poll(request)

            if status == PROVISIONED:
                request.state = WaitState.SUCCEEDED
                elapsed = self.clock.now() - started
                logger.info("✅ Cluster %s provisioned after %d poll(s)", identifier, request.polls)
                return WaitResult(
                    identifier=identifier,
                    status=status,
                    polls=request.polls,
                    elapsed=elapsed,
                    body=body,
                )

            if status in self.failure_statuses:
                raise self._finish(request, WaitState.FAILED, ProvisioningFailedError(identifier, status))

            logger.debug("Cluster %s still pending (status=%r)", identifier, status)

    def _poll(self, request: WaitRequest):
        identifier = request.identifier
        request.polls += 1

        try:
            response = self.fetch(identifier.control_plane, identifier.name)
        except (requests.RequestException, OSError) as e:
            raise self._finish(request, WaitState.FAILED, TransportError(identifier, e)) from e

        if response.status_code != 200:
            raise self._finish(request, WaitState.FAILED, BadStatusError(identifier, response.status_code))

        try:
            body = json.loads(response.content)
            status = body["status"]["status"]
        except (ValueError, KeyError, TypeError) as e:
            error = DecodeError(f"could not decode status of cluster {identifier}: {e}")
            raise self._finish(request, WaitState.FAILED, error) from e

        if not isinstance(status, str):
            error = DecodeError(f"could not decode status of cluster {identifier}: status is {type(status).__name__}")
            raise self._finish(request, WaitState.FAILED, error)

        request.last_status = status
        return status, body

    @staticmethod
    def _finish(request: WaitRequest, state: WaitState, error: WaitError) -> WaitError:
        request.state = state
        error.request = request
        if state is WaitState.CANCELLED:
            logger.warning("🛑 %s", error)
        else:
            logger.error("❌ %s", error)
        return error
