from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from eckprov.api.dependencies import get_provider, raise_for_diagnostics, state_response
from eckprov.modules.models import ApplicationBundleModel, ControlPlaneModel
from eckprov.modules.provider import ECKProvider

TYPE_NAME = "eck_controlplane"

router = APIRouter(prefix="/controlplanes", tags=["controlplanes"])


class ControlPlaneRequest(BaseModel):
    config: Dict[str, Any]


class ControlPlaneUpdateRequest(BaseModel):
    config: Dict[str, Any]
    prior: Dict[str, Any]


def _lookup(name: str) -> ControlPlaneModel:
    return ControlPlaneModel(name=name, applicationbundle=ApplicationBundleModel(version="", autoupgrade=False))


@router.get("")
def list_control_planes(provider: ECKProvider = Depends(get_provider)):
    return state_response(provider.data_source("eck_controlplanes").read())


@router.post("", status_code=201)
def create_control_plane(req: ControlPlaneRequest, provider: ECKProvider = Depends(get_provider)):
    resource = provider.resource(TYPE_NAME)
    plan, diagnostics = resource.plan(req.config)
    raise_for_diagnostics(diagnostics)
    return state_response(resource.create(plan))


@router.get("/{name}")
def get_control_plane(name: str, provider: ECKProvider = Depends(get_provider)):
    result = provider.resource(TYPE_NAME).read(_lookup(name))
    if result.removed:
        raise HTTPException(status_code=404, detail=f"Control plane {name} not found")
    return state_response(result)


@router.put("/{name}")
def update_control_plane(name: str, req: ControlPlaneUpdateRequest, provider: ECKProvider = Depends(get_provider)):
    resource = provider.resource(TYPE_NAME)
    prior, diagnostics = resource.plan(req.prior)
    raise_for_diagnostics(diagnostics)
    if prior.name != name:
        raise HTTPException(status_code=400, detail=f"Prior state describes control plane {prior.name}, not {name}")

    plan, diagnostics = resource.plan(req.config, req.prior)
    raise_for_diagnostics(diagnostics)
    return state_response(resource.update(plan, prior))


@router.delete("/{name}")
def delete_control_plane(name: str, provider: ECKProvider = Depends(get_provider)):
    result = provider.resource(TYPE_NAME).delete(name)
    raise_for_diagnostics(result.diagnostics)
    return {"deleted": name, "diagnostics": result.diagnostics.to_list()}
