"""
Wire models for the ECK REST API.

Field names are snake_case in Python and camelCase on the wire. Unknown fields
sent by the server are ignored so newer API versions keep decoding.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_api(self) -> dict:
        """Serialize for a request body."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ApplicationBundle(APIModel):
    name: str = ""
    version: str = ""


class TimeWindow(APIModel):
    start: int
    end: int


class AutoUpgradeDaysOfWeek(APIModel):
    monday: Optional[TimeWindow] = None
    tuesday: Optional[TimeWindow] = None
    wednesday: Optional[TimeWindow] = None
    thursday: Optional[TimeWindow] = None
    friday: Optional[TimeWindow] = None
    saturday: Optional[TimeWindow] = None
    sunday: Optional[TimeWindow] = None


class ApplicationBundleAutoUpgrade(APIModel):
    days_of_week: Optional[AutoUpgradeDaysOfWeek] = None


class KubernetesResourceStatus(APIModel):
    name: Optional[str] = None
    creation_time: Optional[str] = None
    deletion_time: Optional[str] = None
    status: str = ""


class ControlPlane(APIModel):
    name: str
    application_bundle: ApplicationBundle = Field(default_factory=ApplicationBundle)
    application_bundle_auto_upgrade: Optional[ApplicationBundleAutoUpgrade] = None
    status: Optional[KubernetesResourceStatus] = None


class OpenstackVolume(APIModel):
    size: int
    availability_zone: Optional[str] = None


class OpenstackMachinePool(APIModel):
    version: str = ""
    image_name: str = ""
    flavor_name: str = ""
    replicas: int = 0
    disk: Optional[OpenstackVolume] = None


class KubernetesClusterNetwork(APIModel):
    dns_nameservers: List[str] = Field(default_factory=list)
    node_prefix: str = ""
    pod_prefix: str = ""
    service_prefix: str = ""


class KubernetesClusterOpenStack(APIModel):
    compute_availability_zone: str = ""
    volume_availability_zone: str = ""
    external_network_id: str = Field(default="", alias="externalNetworkID")
    ssh_key_name: Optional[str] = None


class KubernetesClusterFeatures(APIModel):
    autoscaling: Optional[bool] = None
    ingress: Optional[bool] = None
    file_storage: Optional[bool] = None
    prometheus: Optional[bool] = None
    kubernetes_dashboard: Optional[bool] = None


class KubernetesClusterAutoscaling(APIModel):
    minimum_replicas: int
    maximum_replicas: int


class KubernetesClusterWorkloadPool(APIModel):
    name: str
    machine: OpenstackMachinePool = Field(default_factory=OpenstackMachinePool)
    labels: Optional[Dict[str, str]] = None
    autoscaling: Optional[KubernetesClusterAutoscaling] = None


class KubernetesCluster(APIModel):
    name: str
    status: Optional[KubernetesResourceStatus] = None
    application_bundle: ApplicationBundle = Field(default_factory=ApplicationBundle)
    control_plane: OpenstackMachinePool = Field(default_factory=OpenstackMachinePool)
    network: KubernetesClusterNetwork = Field(default_factory=KubernetesClusterNetwork)
    openstack: KubernetesClusterOpenStack = Field(default_factory=KubernetesClusterOpenStack)
    features: Optional[KubernetesClusterFeatures] = None
    workload_pools: List[KubernetesClusterWorkloadPool] = Field(default_factory=list)

    @property
    def provisioning_status(self) -> str:
        return self.status.status if self.status else ""
