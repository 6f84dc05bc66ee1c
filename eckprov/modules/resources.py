"""
ECK resources: control planes and clusters.

Resources take a planned model and return an ``OperationResult`` carrying the
new state and diagnostics. Expected failures are reported as diagnostics, never
raised.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Tuple

from .api_models import ControlPlane, KubernetesCluster
from .base import APIBacked, describe_response
from .client import ECKClient
from .diagnostics import Diagnostics, OperationResult
from .mapping import (
    generate_cluster_model,
    generate_control_plane,
    generate_control_plane_model,
    generate_kubernetes_cluster,
)
from .models import ClusterModel, ControlPlaneModel
from .schema import CLUSTER_RESOURCE, CONTROL_PLANE_RESOURCE, ResourceSchema
from .wait import PROVISIONED, CancellationToken, Clock, ReconciliationWaiter, ResourceIdentifier, WaitError

logger = logging.getLogger(__name__)

DELETED_CODES = (200, 202, 204, 404)


def _plan(schema: ResourceSchema, model, config: Dict[str, Any], prior: Optional[Dict[str, Any]]):
    instance, diagnostics = schema.validate(config)
    if diagnostics.has_error():
        return None, diagnostics
    # computed attributes keep their prior value until refreshed
    for name in schema.computed:
        if instance.get(name) is None and prior:
            instance[name] = prior.get(name)
    return model.from_dict(instance), diagnostics


def _requires_replace(schema: ResourceSchema, plan, prior, diagnostics: Diagnostics, what: str) -> bool:
    changed = schema.replacement_paths(prior.to_dict(), plan.to_dict())
    for path in changed:
        diagnostics.add_attribute_error(
            path,
            f"{what} requires replacement",
            f"Changing {path} cannot be applied in place, the {what.lower()} must be destroyed and recreated.",
        )
    return bool(changed)


class ControlPlaneResource(APIBacked):
    """The ``eck_controlplane`` resource."""

    schema = CONTROL_PLANE_RESOURCE

    def plan(self, config: Dict[str, Any], prior: Optional[Dict[str, Any]] = None) -> Tuple[Optional[ControlPlaneModel], Diagnostics]:
        return _plan(self.schema, ControlPlaneModel, config, prior)

    def create(self, plan: ControlPlaneModel) -> OperationResult:
        logger.info("🦄 Create control plane %s", plan.name)
        result = OperationResult()
        control_plane = generate_control_plane(plan)

        response = self.call(result.diagnostics, "Error creating controlplane", "Could not create controlplane",
                             self.client.create_control_plane, control_plane.to_api())
        if response is None:
            return result
        if response.status_code not in (200, 201, 202):
            result.diagnostics.add_error(
                "Error creating controlplane",
                f"Could not create controlplane, unexpected response from ECK API: {describe_response(response)}",
            )
            return result

        result.state = generate_control_plane_model(control_plane)
        return result

    def read(self, state: ControlPlaneModel) -> OperationResult:
        logger.info("🦄 Read control plane %s", state.name)
        result = OperationResult(state=state)

        response = self.call(result.diagnostics, "Error Reading Control Plane information",
                             f"Could not read Control Plane ID {state.name}",
                             self.client.get_control_plane, state.name)
        if response is None:
            return result
        if response.status_code == 404:
            logger.warning("Control plane %s no longer exists, removing from state", state.name)
            return OperationResult(state=None, removed=True, diagnostics=result.diagnostics)
        if response.status_code != 200:
            result.diagnostics.add_error(
                "Error Reading Control Plane information",
                f"Could not read Control Plane ID {state.name}: {describe_response(response)}",
            )
            return result

        control_plane = self.decode(result.diagnostics, response, ControlPlane, "control plane")
        if control_plane is not None:
            result.state = generate_control_plane_model(control_plane)
        return result

    def update(self, plan: ControlPlaneModel, prior: ControlPlaneModel) -> OperationResult:
        logger.info("🦄 Update control plane %s", prior.name)
        result = OperationResult()
        if _requires_replace(self.schema, plan, prior, result.diagnostics, "Control plane"):
            return result

        control_plane = generate_control_plane(plan)
        response = self.call(result.diagnostics, "Error updating controlplane", "Could not update controlplane",
                             self.client.update_control_plane, prior.name, control_plane.to_api())
        if response is None:
            return result
        if response.status_code not in (200, 202):
            result.diagnostics.add_error(
                "Error updating controlplane",
                f"Received unexpected HTTP response: {describe_response(response)}",
            )
            return result

        result.state = generate_control_plane_model(control_plane)

        refreshed = self.read(result.state)
        if refreshed.ok and refreshed.state is not None:
            result.state = refreshed.state
        else:
            result.diagnostics.add_warning(
                "Unable to refresh control plane",
                f"Control plane {plan.name} was updated but could not be read back; state reflects the plan.",
            )
        return result

    def delete(self, name: str) -> OperationResult:
        logger.info("🦄 Delete control plane %s", name)
        result = OperationResult()

        response = self.call(result.diagnostics, "Error Deleting Control Plane", "Could not delete control plane",
                             self.client.delete_control_plane, name)
        if response is None:
            return result
        if response.status_code not in DELETED_CODES:
            result.diagnostics.add_error(
                "Error Deleting Control Plane",
                f"Could not delete control plane, unexpected response from ECK API: {describe_response(response)}",
            )
            return result

        return OperationResult(state=None, removed=True, diagnostics=result.diagnostics)


class ClusterResource(APIBacked):
    """The ``eck_cluster`` resource.

    Args:
        client: provider configured client
        interval: seconds between status polls when ``wait`` is set
        timeout: overall wait deadline in seconds
        clock: time source for the waiter
        failure_statuses: statuses that end a wait as failed
    """

    schema = CLUSTER_RESOURCE

    def __init__(
        self,
        client: ECKClient,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
        clock: Optional[Clock] = None,
        failure_statuses: Iterable[str] = (),
    ):
        super().__init__(client)
        self.waiter = ReconciliationWaiter(
            client.get_cluster,
            interval=interval,
            timeout=timeout,
            clock=clock,
            failure_statuses=failure_statuses,
        )

    def plan(self, config: Dict[str, Any], prior: Optional[Dict[str, Any]] = None) -> Tuple[Optional[ClusterModel], Diagnostics]:
        return _plan(self.schema, ClusterModel, config, prior)

    def create(self, plan: ClusterModel, cancel_token: Optional[CancellationToken] = None) -> OperationResult:
        logger.info("🦄 Create cluster %s", plan.identifier)
        result = OperationResult()
        cluster = generate_kubernetes_cluster(plan)

        response = self.call(result.diagnostics, "Error creating cluster", "Could not create cluster",
                             self.client.create_cluster, plan.eckcp, cluster.to_api())
        if response is None:
            return result
        if response.status_code != 202:
            result.diagnostics.add_error(
                "Error creating cluster",
                f"Could not create cluster, unexpected response from ECK API: {describe_response(response)}",
            )
            return result

        # a failed wait still records state, the cluster exists remotely
        observed, kubeconfig, _ = self._settle(plan, result.diagnostics, cancel_token)
        result.state = generate_cluster_model(observed or cluster, plan.eckcp, kubeconfig, plan.wait)
        return result

    def read(self, state: ClusterModel) -> OperationResult:
        logger.info("🦄 Read cluster %s", state.identifier)
        result = OperationResult(state=state)

        response = self.call(result.diagnostics, "Error Reading cluster information",
                             f"Could not read cluster {state.name}",
                             self.client.get_cluster, state.eckcp, state.name)
        if response is None:
            return result
        if response.status_code == 404:
            logger.warning("Cluster %s no longer exists, removing from state", state.identifier)
            return OperationResult(state=None, removed=True, diagnostics=result.diagnostics)
        if response.status_code != 200:
            result.diagnostics.add_error(
                "Error Reading cluster information",
                f"Could not read cluster {state.name}: {describe_response(response)}",
            )
            return result

        cluster = self.decode(result.diagnostics, response, KubernetesCluster, "cluster")
        if cluster is None:
            return result

        kubeconfig = None
        if cluster.provisioning_status == PROVISIONED:
            kubeconfig = self.fetch_kubeconfig(state.identifier, result.diagnostics)
        result.state = generate_cluster_model(cluster, state.eckcp, kubeconfig, state.wait)
        return result

    def update(
        self,
        plan: ClusterModel,
        prior: ClusterModel,
        cancel_token: Optional[CancellationToken] = None,
    ) -> OperationResult:
        logger.info("🦄 Update cluster %s", prior.identifier)
        result = OperationResult()
        if _requires_replace(self.schema, plan, prior, result.diagnostics, "Cluster"):
            return result

        cluster = generate_kubernetes_cluster(plan)
        response = self.call(result.diagnostics, "Error updating cluster", "Could not update cluster",
                             self.client.update_cluster, plan.eckcp, plan.name, cluster.to_api())
        if response is None:
            return result
        if response.status_code not in (200, 202):
            result.diagnostics.add_error(
                "Error updating cluster",
                f"Could not update cluster, unexpected response from ECK API: {describe_response(response)}",
            )
            return result

        observed, kubeconfig, wait_failed = self._settle(plan, result.diagnostics, cancel_token)
        if wait_failed:
            return result
        if kubeconfig is None:
            kubeconfig = prior.kubeconfig
        result.state = generate_cluster_model(observed or cluster, plan.eckcp, kubeconfig, plan.wait)
        return result

    def delete(self, identifier: ResourceIdentifier) -> OperationResult:
        logger.info("🦄 Delete cluster %s", identifier)
        result = OperationResult()

        response = self.call(result.diagnostics, "Error deleting cluster", "Could not delete cluster",
                             self.client.delete_cluster, identifier.control_plane, identifier.name)
        if response is None:
            return result
        if response.status_code not in DELETED_CODES:
            result.diagnostics.add_error(
                "Error deleting cluster",
                f"Could not delete cluster, unexpected response from ECK API: {describe_response(response)}",
            )
            return result

        return OperationResult(state=None, removed=True, diagnostics=result.diagnostics)

    def _settle(self, plan: ClusterModel, diagnostics: Diagnostics, cancel_token: Optional[CancellationToken]):
        """Optionally wait, then observe the cluster once.

        Returns (observed cluster or None, kubeconfig or None, wait failed). A
        failed wait returns straight away without refreshing the cluster.
        """
        observed = None

        if plan.wait:
            try:
                outcome = self.waiter.wait(plan.identifier, cancel_token)
            except WaitError as e:
                # no further reads once a wait has failed or been cancelled
                diagnostics.add_error("Error Waiting for Resource to be Ready", str(e))
                return None, None, True
            else:
                try:
                    observed = KubernetesCluster.model_validate(outcome.body)
                except ValueError as e:
                    logger.debug("Provisioned body of %s did not decode: %s", plan.identifier, e)

        if observed is None:
            observed = self._refresh(plan, diagnostics)

        kubeconfig = None
        if observed is not None and observed.provisioning_status == PROVISIONED:
            kubeconfig = self.fetch_kubeconfig(plan.identifier, diagnostics)
        return observed, kubeconfig, False

    def _refresh(self, plan: ClusterModel, diagnostics: Diagnostics) -> Optional[KubernetesCluster]:
        refresh = Diagnostics()
        response = self.call(refresh, "Unable to refresh cluster", f"Cluster {plan.identifier}",
                             self.client.get_cluster, plan.eckcp, plan.name)
        cluster = None
        if response is not None and response.status_code == 200:
            cluster = self.decode(refresh, response, KubernetesCluster, "cluster")
        if cluster is None:
            diagnostics.add_warning(
                "Unable to refresh cluster",
                f"Cluster {plan.identifier} could not be read back; state reflects the plan.",
            )
        return cluster
