import asyncio
import logging
import threading
from typing import Any, Callable, Dict

from fastapi import FastAPI, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import State

from eckprov import __version__
from eckprov.modules.diagnostics import Diagnostics, OperationResult
from eckprov.modules.provider import ECKProvider
from eckprov.modules.wait import CancellationToken

logger = logging.getLogger(__name__)

DISCONNECT_POLL_INTERVAL = 0.5


def default_provider_factory() -> ECKProvider:
    return ECKProvider(version=__version__)


def init_provider_state(app: FastAPI, factory: Callable[[], ECKProvider] = default_provider_factory) -> None:
    """Attach an empty provider slot to the application."""
    app.state.provider = None
    app.state.provider_factory = factory
    app.state.provider_lock = threading.Lock()


def configure_provider(state: State) -> ECKProvider:
    """Build and configure a provider from ECK_* settings, storing it on ``state``."""
    provider = state.provider_factory()
    diagnostics = provider.configure()
    if diagnostics.has_error():
        state.provider = None
        raise HTTPException(status_code=503, detail=diagnostics.to_list())
    state.provider = provider
    return provider


def get_provider(request: Request) -> ECKProvider:
    """The application's provider, re-authenticated once its token is rejected."""
    state = request.app.state
    with state.provider_lock:
        provider = state.provider
        if provider is None:
            return configure_provider(state)
        if provider.client.unauthorized:
            logger.info("🔑 ECK API rejected the provider token, re-authenticating")
            return configure_provider(state)
        return provider


async def watch_disconnect(request: Request, token: CancellationToken,
                           interval: float = DISCONNECT_POLL_INTERVAL) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            logger.warning("🛑 Client disconnected from %s, cancelling", request.url.path)
            token.cancel()
            return
        await asyncio.sleep(interval)


async def run_cancellable(request: Request, fn: Callable[..., Any], *args: Any) -> Any:
    """Run ``fn(*args, token)`` in the threadpool, cancelling it if the client goes away."""
    token = CancellationToken()
    watcher = asyncio.ensure_future(watch_disconnect(request, token))
    try:
        return await run_in_threadpool(fn, *args, token)
    finally:
        watcher.cancel()


def raise_for_diagnostics(diagnostics: Diagnostics) -> None:
    """Map error diagnostics to an HTTP error.

    Attribute errors point at the request body and become 400, anything else
    is a failure talking to the ECK API and becomes 502.
    """
    errors = diagnostics.errors()
    if not errors:
        return
    status_code = 400 if any(d.path for d in errors) else 502
    raise HTTPException(status_code=status_code, detail=diagnostics.to_list())


def state_response(result: OperationResult) -> Dict[str, Any]:
    raise_for_diagnostics(result.diagnostics)
    return {
        "state": result.state.to_dict() if result.state is not None else None,
        "diagnostics": result.diagnostics.to_list(),
    }
