from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from eckprov.api.dependencies import get_provider, raise_for_diagnostics, run_cancellable, state_response
from eckprov.modules.provider import ECKProvider
from eckprov.modules.wait import (
    BadStatusError,
    DecodeError,
    ProvisioningFailedError,
    ReconciliationWaiter,
    ResourceIdentifier,
    TransportError,
    WaitCancelledError,
    WaitError,
    WaitTimeoutError,
)

TYPE_NAME = "eck_cluster"

router = APIRouter(prefix="/controlplanes/{eckcp}/clusters", tags=["clusters"])

WAIT_ERROR_CODES = {
    TransportError: 502,
    BadStatusError: 502,
    DecodeError: 502,
    ProvisioningFailedError: 409,
    WaitTimeoutError: 504,
    WaitCancelledError: 503,
}


class ClusterRequest(BaseModel):
    config: Dict[str, Any]


class ClusterUpdateRequest(BaseModel):
    config: Dict[str, Any]
    prior: Dict[str, Any]


def _scoped(eckcp: str, config: Dict[str, Any]) -> Dict[str, Any]:
    scoped = dict(config)
    if scoped.setdefault("eckcp", eckcp) != eckcp:
        raise HTTPException(
            status_code=400,
            detail=f"Cluster belongs to control plane {scoped['eckcp']}, not {eckcp}",
        )
    return scoped


@router.post("", status_code=201)
async def create_cluster(
    eckcp: str, req: ClusterRequest, request: Request, provider: ECKProvider = Depends(get_provider)
):
    resource = provider.resource(TYPE_NAME)
    plan, diagnostics = resource.plan(_scoped(eckcp, req.config))
    raise_for_diagnostics(diagnostics)
    return state_response(await run_cancellable(request, resource.create, plan))


@router.get("/{name}")
def get_cluster(eckcp: str, name: str, provider: ECKProvider = Depends(get_provider)):
    return state_response(provider.data_source(TYPE_NAME).read({"eckcp": eckcp, "name": name}))


@router.put("/{name}")
async def update_cluster(
    eckcp: str,
    name: str,
    req: ClusterUpdateRequest,
    request: Request,
    provider: ECKProvider = Depends(get_provider),
):
    resource = provider.resource(TYPE_NAME)
    prior, diagnostics = resource.plan(_scoped(eckcp, req.prior))
    raise_for_diagnostics(diagnostics)
    if prior.name != name:
        raise HTTPException(status_code=400, detail=f"Prior state describes cluster {prior.name}, not {name}")

    plan, diagnostics = resource.plan(_scoped(eckcp, req.config), req.prior)
    raise_for_diagnostics(diagnostics)
    return state_response(await run_cancellable(request, resource.update, plan, prior))


@router.delete("/{name}")
def delete_cluster(eckcp: str, name: str, provider: ECKProvider = Depends(get_provider)):
    identifier = ResourceIdentifier(control_plane=eckcp, name=name)
    result = provider.resource(TYPE_NAME).delete(identifier)
    raise_for_diagnostics(result.diagnostics)
    return {"deleted": str(identifier), "diagnostics": result.diagnostics.to_list()}


@router.get("/{name}/kubeconfig", response_class=PlainTextResponse)
def get_kubeconfig(eckcp: str, name: str, provider: ECKProvider = Depends(get_provider)):
    result = provider.data_source("eck_kubeconfig").read({"eckcp": eckcp, "cluster": name})
    raise_for_diagnostics(result.diagnostics)
    return result.state.kubeconfig


@router.post("/{name}/wait")
async def wait_cluster(
    eckcp: str,
    name: str,
    request: Request,
    interval: Optional[float] = None,
    timeout: Optional[float] = None,
    provider: ECKProvider = Depends(get_provider),
):
    identifier = ResourceIdentifier(control_plane=eckcp, name=name)
    try:
        waiter = ReconciliationWaiter(provider.client.get_cluster, interval=interval, timeout=timeout)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        outcome = await run_cancellable(request, waiter.wait, identifier)
    except WaitError as e:
        raise HTTPException(status_code=WAIT_ERROR_CODES.get(type(e), 502), detail=str(e))

    return {
        "cluster": str(identifier),
        "status": outcome.status,
        "polls": outcome.polls,
        "elapsed": outcome.elapsed,
    }
