"""
Translation between declarative models and ECK API wire models.
"""
from typing import List, Optional

from .api_models import (
    ApplicationBundle,
    ApplicationBundleAutoUpgrade,
    AutoUpgradeDaysOfWeek,
    ControlPlane,
    KubernetesCluster,
    KubernetesClusterAutoscaling,
    KubernetesClusterFeatures,
    KubernetesClusterNetwork,
    KubernetesClusterOpenStack,
    KubernetesClusterWorkloadPool,
    OpenstackMachinePool,
    OpenstackVolume,
    TimeWindow,
)
from .models import (
    DEFAULT_POOL_DISK,
    ApplicationBundleModel,
    AutoscalingModel,
    ClusterFeaturesModel,
    ClusterModel,
    ClusterNetworkModel,
    ClusterOpenstackModel,
    ControlPlaneModel,
    ControlPlaneNodesModel,
    WorkloadNodePoolModel,
)

CLUSTER_BUNDLE_PREFIX = "kubernetes-cluster-"
CONTROL_PLANE_BUNDLE_PREFIX = "control-plane-"


def bundle_version(bundle: str, prefix: str) -> str:
    """Strip the bundle family prefix, 'kubernetes-cluster-1.4.1' -> '1.4.1'."""
    return bundle[len(prefix):] if bundle.startswith(prefix) else bundle


def default_upgrade_window() -> ApplicationBundleAutoUpgrade:
    """Weekday upgrades between midnight and 07:00, the ECK UI default."""
    window = {day: TimeWindow(start=0, end=7)
              for day in ("monday", "tuesday", "wednesday", "thursday", "friday")}
    return ApplicationBundleAutoUpgrade(days_of_week=AutoUpgradeDaysOfWeek(**window))


def is_days_of_week_set(auto_upgrade: Optional[ApplicationBundleAutoUpgrade]) -> bool:
    if auto_upgrade is None:
        return False
    return auto_upgrade.days_of_week is not None


# Control planes

def generate_control_plane(plan: ControlPlaneModel) -> ControlPlane:
    version = plan.applicationbundle.version
    return ControlPlane(
        name=plan.name,
        application_bundle=ApplicationBundle(
            name=CONTROL_PLANE_BUNDLE_PREFIX + version,
            version=version,
        ),
        application_bundle_auto_upgrade=default_upgrade_window() if plan.applicationbundle.autoupgrade else None,
    )


def generate_control_plane_model(control_plane: ControlPlane) -> ControlPlaneModel:
    bundle = control_plane.application_bundle
    version = bundle.version or bundle_version(bundle.name, CONTROL_PLANE_BUNDLE_PREFIX)
    return ControlPlaneModel(
        name=control_plane.name,
        applicationbundle=ApplicationBundleModel(
            version=version,
            autoupgrade=is_days_of_week_set(control_plane.application_bundle_auto_upgrade),
        ),
    )


# Clusters

def generate_workload_node_pools(pools: List[WorkloadNodePoolModel]) -> List[KubernetesClusterWorkloadPool]:
    workload_pools = []
    for pool in pools:
        workload_pool = KubernetesClusterWorkloadPool(
            name=pool.name,
            machine=OpenstackMachinePool(
                disk=OpenstackVolume(size=pool.disk),
                flavor_name=pool.flavor,
                image_name=pool.image,
                replicas=pool.replicas,
                version=pool.version or "",
            ),
        )
        if pool.autoscaling is not None:
            workload_pool.autoscaling = KubernetesClusterAutoscaling(
                minimum_replicas=pool.autoscaling.minimum,
                maximum_replicas=pool.autoscaling.maximum,
            )
        if pool.labels:
            workload_pool.labels = dict(pool.labels)
        workload_pools.append(workload_pool)
    return workload_pools


def generate_workload_node_pool_models(pools: List[KubernetesClusterWorkloadPool]) -> List[WorkloadNodePoolModel]:
    """Render workload pools for state."""
    models = []
    for pool in pools:
        machine = pool.machine
        model = WorkloadNodePoolModel(
            name=pool.name,
            disk=machine.disk.size if machine.disk else DEFAULT_POOL_DISK,
            flavor=machine.flavor_name,
            image=machine.image_name,
            replicas=machine.replicas,
            version=machine.version or None,
        )
        if pool.autoscaling is not None:
            model.autoscaling = AutoscalingModel(
                minimum=pool.autoscaling.minimum_replicas,
                maximum=pool.autoscaling.maximum_replicas,
            )
        model.labels = dict(pool.labels) if pool.labels else None
        models.append(model)
    return models


def generate_kubernetes_cluster(plan: ClusterModel) -> KubernetesCluster:
    control_plane = plan.controlplane
    network = plan.clusternetwork
    openstack = plan.clusteropenstack
    features = plan.clusterfeatures

    return KubernetesCluster(
        name=plan.name,
        application_bundle=ApplicationBundle(
            name=plan.applicationbundle,
            version=bundle_version(plan.applicationbundle, CLUSTER_BUNDLE_PREFIX),
        ),
        control_plane=OpenstackMachinePool(
            image_name=control_plane.image,
            flavor_name=control_plane.flavor,
            replicas=control_plane.replicas,
            version=control_plane.version,
            disk=OpenstackVolume(size=control_plane.disk) if control_plane.disk else None,
        ),
        network=KubernetesClusterNetwork(
            dns_nameservers=list(network.dnsnameservers or []),
            node_prefix=network.nodeprefix or "",
            service_prefix=network.serviceprefix or "",
            pod_prefix=network.podprefix or "",
        ),
        openstack=KubernetesClusterOpenStack(
            external_network_id=openstack.externalnetworkid or "",
            compute_availability_zone=openstack.computeaz,
            volume_availability_zone=openstack.volumeaz,
            ssh_key_name=openstack.sshkey,
        ),
        features=KubernetesClusterFeatures(
            autoscaling=features.autoscaling,
            ingress=features.ingress,
            file_storage=features.longhorn,
            prometheus=features.prometheus,
            kubernetes_dashboard=features.dashboard,
        ),
        workload_pools=generate_workload_node_pools(plan.workloadnodepools),
    )


def generate_cluster_model(
    cluster: KubernetesCluster,
    eckcp: str,
    kubeconfig: Optional[str],
    wait: bool = False,
) -> ClusterModel:
    features = cluster.features or KubernetesClusterFeatures()
    disk = cluster.control_plane.disk

    return ClusterModel(
        name=cluster.name,
        eckcp=eckcp,
        applicationbundle=cluster.application_bundle.name,
        status=cluster.provisioning_status or None,
        kubeconfig=kubeconfig,
        wait=wait,
        controlplane=ControlPlaneNodesModel(
            flavor=cluster.control_plane.flavor_name,
            image=cluster.control_plane.image_name,
            replicas=cluster.control_plane.replicas,
            version=cluster.control_plane.version,
            disk=disk.size if disk else None,
        ),
        clusternetwork=ClusterNetworkModel(
            dnsnameservers=list(cluster.network.dns_nameservers),
            nodeprefix=cluster.network.node_prefix or None,
            podprefix=cluster.network.pod_prefix or None,
            serviceprefix=cluster.network.service_prefix or None,
        ),
        clusteropenstack=ClusterOpenstackModel(
            computeaz=cluster.openstack.compute_availability_zone,
            volumeaz=cluster.openstack.volume_availability_zone,
            externalnetworkid=cluster.openstack.external_network_id or None,
            sshkey=cluster.openstack.ssh_key_name,
        ),
        clusterfeatures=ClusterFeaturesModel(
            autoscaling=bool(features.autoscaling),
            ingress=bool(features.ingress),
            longhorn=bool(features.file_storage),
            prometheus=bool(features.prometheus),
            dashboard=bool(features.kubernetes_dashboard),
        ),
        workloadnodepools=generate_workload_node_pool_models(cluster.workload_pools),
    )
