"""
Declarative models for ECK resources and data sources.

Attribute names follow the resource schema so a model converts to and from a
plain configuration or state dict without renaming.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .wait import ResourceIdentifier

DEFAULT_CONTROL_PLANE = "default"
DEFAULT_CLUSTER_BUNDLE = "kubernetes-cluster-1.4.1"
DEFAULT_AVAILABILITY_ZONE = "nova"
DEFAULT_POOL_DISK = 50


class StateModel:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ApplicationBundleModel(StateModel):
    version: str
    autoupgrade: bool

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApplicationBundleModel":
        return cls(version=data["version"], autoupgrade=bool(data["autoupgrade"]))


@dataclass
class ControlPlaneModel(StateModel):
    name: str
    applicationbundle: ApplicationBundleModel

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ControlPlaneModel":
        return cls(
            name=data["name"],
            applicationbundle=ApplicationBundleModel.from_dict(data["applicationbundle"]),
        )


@dataclass
class ControlPlanesDataModel(StateModel):
    controlplanes: List[ControlPlaneModel] = field(default_factory=list)


@dataclass
class ControlPlaneNodesModel(StateModel):
    flavor: str
    image: str
    replicas: int
    version: str
    disk: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ControlPlaneNodesModel":
        return cls(
            flavor=data["flavor"],
            image=data["image"],
            replicas=int(data["replicas"]),
            version=data["version"],
            disk=data.get("disk"),
        )


@dataclass
class ClusterNetworkModel(StateModel):
    dnsnameservers: Optional[List[str]] = None
    nodeprefix: Optional[str] = None
    podprefix: Optional[str] = None
    serviceprefix: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterNetworkModel":
        nameservers = data.get("dnsnameservers")
        return cls(
            dnsnameservers=list(nameservers) if nameservers is not None else None,
            nodeprefix=data.get("nodeprefix"),
            podprefix=data.get("podprefix"),
            serviceprefix=data.get("serviceprefix"),
        )


@dataclass
class ClusterOpenstackModel(StateModel):
    computeaz: str = DEFAULT_AVAILABILITY_ZONE
    externalnetworkid: Optional[str] = None
    sshkey: Optional[str] = None
    volumeaz: str = DEFAULT_AVAILABILITY_ZONE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterOpenstackModel":
        return cls(
            computeaz=data.get("computeaz") or DEFAULT_AVAILABILITY_ZONE,
            externalnetworkid=data.get("externalnetworkid"),
            sshkey=data.get("sshkey"),
            volumeaz=data.get("volumeaz") or DEFAULT_AVAILABILITY_ZONE,
        )


@dataclass
class ClusterFeaturesModel(StateModel):
    autoscaling: bool = False
    ingress: bool = False
    longhorn: bool = False
    prometheus: bool = False
    dashboard: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterFeaturesModel":
        return cls(**{name: bool(data.get(name, False)) for name in
                      ("autoscaling", "ingress", "longhorn", "prometheus", "dashboard")})


@dataclass
class AutoscalingModel(StateModel):
    minimum: int
    maximum: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutoscalingModel":
        return cls(minimum=int(data["minimum"]), maximum=int(data["maximum"]))


@dataclass
class WorkloadNodePoolModel(StateModel):
    name: str
    flavor: str
    image: str
    replicas: int
    disk: int = DEFAULT_POOL_DISK
    labels: Optional[Dict[str, str]] = None
    version: Optional[str] = None
    autoscaling: Optional[AutoscalingModel] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkloadNodePoolModel":
        autoscaling = data.get("autoscaling")
        labels = data.get("labels")
        return cls(
            name=data["name"],
            flavor=data["flavor"],
            image=data["image"],
            replicas=int(data["replicas"]),
            disk=int(data.get("disk", DEFAULT_POOL_DISK)),
            labels=dict(labels) if labels is not None else None,
            version=data.get("version"),
            autoscaling=AutoscalingModel.from_dict(autoscaling) if autoscaling else None,
        )


@dataclass
class ClusterModel(StateModel):
    name: str
    controlplane: ControlPlaneNodesModel
    clusternetwork: ClusterNetworkModel
    eckcp: str = DEFAULT_CONTROL_PLANE
    applicationbundle: str = DEFAULT_CLUSTER_BUNDLE
    kubeconfig: Optional[str] = None
    status: Optional[str] = None
    wait: bool = False
    clusteropenstack: ClusterOpenstackModel = field(default_factory=ClusterOpenstackModel)
    clusterfeatures: ClusterFeaturesModel = field(default_factory=ClusterFeaturesModel)
    workloadnodepools: List[WorkloadNodePoolModel] = field(default_factory=list)

    @property
    def identifier(self) -> ResourceIdentifier:
        return ResourceIdentifier(control_plane=self.eckcp, name=self.name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterModel":
        return cls(
            name=data["name"],
            eckcp=data.get("eckcp") or DEFAULT_CONTROL_PLANE,
            applicationbundle=data.get("applicationbundle") or DEFAULT_CLUSTER_BUNDLE,
            kubeconfig=data.get("kubeconfig"),
            status=data.get("status"),
            wait=bool(data.get("wait", False)),
            controlplane=ControlPlaneNodesModel.from_dict(data["controlplane"]),
            clusternetwork=ClusterNetworkModel.from_dict(data["clusternetwork"]),
            clusteropenstack=ClusterOpenstackModel.from_dict(data.get("clusteropenstack") or {}),
            clusterfeatures=ClusterFeaturesModel.from_dict(data.get("clusterfeatures") or {}),
            workloadnodepools=[
                WorkloadNodePoolModel.from_dict(pool) for pool in data.get("workloadnodepools") or []
            ],
        )


@dataclass
class KubeconfigModel(StateModel):
    eckcp: str
    cluster: str
    kubeconfig: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KubeconfigModel":
        return cls(
            eckcp=data.get("eckcp") or DEFAULT_CONTROL_PLANE,
            cluster=data["cluster"],
            kubeconfig=data.get("kubeconfig"),
        )
