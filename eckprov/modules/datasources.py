"""
ECK data sources: control plane listing, cluster lookup and kubeconfig.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .api_models import ControlPlane, KubernetesCluster
from .base import APIBacked, describe_response
from .diagnostics import OperationResult
from .mapping import generate_cluster_model, generate_control_plane_model
from .models import ControlPlanesDataModel, KubeconfigModel
from .schema import CLUSTER_DATA_SOURCE, CONTROL_PLANES_DATA_SOURCE, KUBECONFIG_DATA_SOURCE
from .wait import PROVISIONED, ResourceIdentifier

logger = logging.getLogger(__name__)

_CONTROL_PLANES = TypeAdapter(List[ControlPlane])


class ControlPlanesDataSource(APIBacked):
    """The ``eck_controlplanes`` data source."""

    schema = CONTROL_PLANES_DATA_SOURCE

    def read(self, config: Optional[Dict[str, Any]] = None) -> OperationResult:
        result = OperationResult()

        response = self.call(result.diagnostics, "Unable to retrieve control plane information",
                             "Could not list control planes", self.client.list_control_planes)
        if response is None:
            return result
        if response.status_code != 200:
            result.diagnostics.add_error(
                "Unable to retrieve control plane information",
                f"Error retrieving control plane information, {describe_response(response)}",
            )
            return result

        try:
            control_planes = _CONTROL_PLANES.validate_json(response.content)
        except ValidationError as e:
            result.diagnostics.add_error(
                "Unable to read control plane information",
                f"An error occurred while parsing the response from the ECK API. JSON Error: {e}",
            )
            return result

        result.state = ControlPlanesDataModel(
            controlplanes=[generate_control_plane_model(cp) for cp in control_planes]
        )
        return result


class ClusterDataSource(APIBacked):
    """The ``eck_cluster`` data source."""

    schema = CLUSTER_DATA_SOURCE

    def read(self, config: Dict[str, Any]) -> OperationResult:
        result = OperationResult()
        instance, diagnostics = self.schema.validate(config)
        result.diagnostics.extend(diagnostics)
        if diagnostics.has_error():
            return result

        identifier = ResourceIdentifier(control_plane=instance["eckcp"], name=instance["name"])
        logger.info("🔍 Reading cluster %s", identifier)

        response = self.call(result.diagnostics, "Unable to retrieve cluster information",
                             f"Could not read cluster {identifier}",
                             self.client.get_cluster, identifier.control_plane, identifier.name)
        if response is None:
            return result
        if response.status_code != 200:
            result.diagnostics.add_error(
                "Unable to retrieve cluster information",
                f"Error retrieving cluster information, {describe_response(response)}",
            )
            return result

        cluster = self.decode(result.diagnostics, response, KubernetesCluster, "cluster")
        if cluster is None:
            return result

        kubeconfig = None
        if cluster.provisioning_status == PROVISIONED:
            kubeconfig = self.fetch_kubeconfig(identifier, result.diagnostics)
        result.state = generate_cluster_model(cluster, identifier.control_plane, kubeconfig)
        return result


class KubeconfigDataSource(APIBacked):
    """The ``eck_kubeconfig`` data source."""

    schema = KUBECONFIG_DATA_SOURCE

    def read(self, config: Dict[str, Any]) -> OperationResult:
        result = OperationResult()
        instance, diagnostics = self.schema.validate(config)
        result.diagnostics.extend(diagnostics)
        if diagnostics.has_error():
            return result

        model = KubeconfigModel.from_dict(instance)
        identifier = ResourceIdentifier(control_plane=model.eckcp, name=model.cluster)

        response = self.call(result.diagnostics, "Unable to retrieve kubeconfig",
                             f"Could not fetch kubeconfig of cluster {identifier}",
                             self.client.get_kubeconfig, identifier.control_plane, identifier.name)
        if response is None:
            return result
        if response.status_code != 200:
            result.diagnostics.add_error(
                "Unable to retrieve kubeconfig",
                f"Could not fetch kubeconfig of cluster {identifier}: {describe_response(response)}",
            )
            return result

        model.kubeconfig = response.text
        result.state = model
        return result
