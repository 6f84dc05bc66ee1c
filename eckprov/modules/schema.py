"""
Schemas for ECK resources and data sources.

Each schema is a JSON Schema document. Defaults declared in the schema are
filled into the configuration while it is validated, so a validated instance
is complete and ready to be turned into a model.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from jsonschema import Draft7Validator, validators

from .diagnostics import Diagnostics
from .models import (
    DEFAULT_AVAILABILITY_ZONE,
    DEFAULT_CLUSTER_BUNDLE,
    DEFAULT_CONTROL_PLANE,
    DEFAULT_POOL_DISK,
)

IPV4_PATTERN = (
    r"^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9]?[0-9])\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9]?[0-9])$"
)
CIDR_PATTERN = IPV4_PATTERN[:-1] + r"\/(?:3[0-2]|[1-2]?[0-9])$"

PATTERN_MESSAGES = {
    IPV4_PATTERN: "Must be a valid IP address",
    CIDR_PATTERN: "Must be a valid CIDR-formatted range",
}


def _extend_with_default(validator_class):
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for name, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(name, copy.deepcopy(subschema["default"]))
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultingValidator = _extend_with_default(Draft7Validator)


def _string(description: str, **extra) -> Dict[str, Any]:
    return {"type": "string", "description": description, **extra}


def _nullable(kind: str, description: str = "") -> Dict[str, Any]:
    return {"type": [kind, "null"], "description": description}


def _flag(description: str) -> Dict[str, Any]:
    return {"type": "boolean", "default": False, "description": description}


@dataclass
class ResourceSchema:
    """A schema plus the attribute behaviour that JSON Schema cannot express."""
    type_name: str
    schema: Dict[str, Any]
    computed: Tuple[str, ...] = ()
    requires_replace: Tuple[str, ...] = ()
    description: str = ""
    _validator: Any = field(default=None, init=False, repr=False)

    def validate(self, config: Dict[str, Any]) -> Tuple[Dict[str, Any], Diagnostics]:
        """Apply defaults and validate a configuration.

        Returns a defaulted deep copy of ``config`` and any validation errors.
        """
        if self._validator is None:
            self._validator = DefaultingValidator(self.schema)
        instance = copy.deepcopy(config) if config is not None else {}
        diagnostics = Diagnostics()
        for error in sorted(self._validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path]):
            path = ".".join(str(p) for p in error.absolute_path) or None
            message = error.message
            if error.validator == "pattern":
                message = PATTERN_MESSAGES.get(error.validator_value, message)
            diagnostics.add_attribute_error(path, f"Invalid {self.type_name} configuration", message)
        return instance, diagnostics

    def replacement_paths(self, prior: Dict[str, Any], planned: Dict[str, Any]):
        """Attributes whose change forces delete and create."""
        return [name for name in self.requires_replace if prior.get(name) != planned.get(name)]


MACHINE_POOL_ATTRIBUTES = {
    "flavor": _string("The flavor (size) of the machine."),
    "image": _string("Which OS image to use.  Must be a verified and signed ECK image"),
    "replicas": {"type": "integer", "minimum": 0},
}

CONTROL_PLANE_RESOURCE = ResourceSchema(
    type_name="eck_controlplane",
    description="An ECK Control Plane, a management unit under which clusters are grouped.",
    requires_replace=("name",),
    schema={
        "type": "object",
        "additionalProperties": False,
        "required": ["name", "applicationbundle"],
        "properties": {
            "name": _string("The name of the ECK Control Plane.", minLength=1),
            "applicationbundle": {
                "type": "object",
                "additionalProperties": False,
                "required": ["version", "autoupgrade"],
                "properties": {
                    "version": _string("The version of the ECK Control Plane.", minLength=1),
                    "autoupgrade": {
                        "type": "boolean",
                        "description": "Whether automatic upgrades of the ECK Control Plane are enabled.",
                    },
                },
            },
        },
    },
)

CLUSTER_RESOURCE = ResourceSchema(
    type_name="eck_cluster",
    description="A Kubernetes cluster provisioned by an ECK Control Plane.",
    computed=("kubeconfig", "status"),
    requires_replace=("name", "eckcp"),
    schema={
        "type": "object",
        "additionalProperties": False,
        "required": ["name", "controlplane", "clusternetwork"],
        "properties": {
            "name": _string("The name of the ECK cluster.", minLength=1),
            "eckcp": _string(
                "The associated ECK Control Plane for the cluster.",
                default=DEFAULT_CONTROL_PLANE,
            ),
            "applicationbundle": _string(
                "The version of the bundled components in the cluster.",
                default=DEFAULT_CLUSTER_BUNDLE,
            ),
            "kubeconfig": _nullable("string", "The kubeconfig for the cluster."),
            "status": _nullable("string", "The provisioning status of the cluster."),
            "wait": _flag("Whether to wait for the cluster to be provisioned"),
            "controlplane": {
                "type": "object",
                "additionalProperties": False,
                "required": ["flavor", "image", "replicas", "version"],
                "properties": {
                    **MACHINE_POOL_ATTRIBUTES,
                    "replicas": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "How many replicas to provision in a control plane.  "
                                       "Must be an odd number, 3 is recommended.",
                    },
                    "version": _string("The version of Kubernetes.  Must match the version bundled with the OS image."),
                    "disk": {
                        "type": ["integer", "null"],
                        "minimum": 1,
                        "description": "Size of a dedicated persistent volume for control plane nodes. "
                                       "If left unset, ephemeral storage is used.",
                    },
                },
            },
            "clusternetwork": {
                "type": "object",
                "additionalProperties": False,
                "properties": {
                    "dnsnameservers": {
                        "type": ["array", "null"],
                        "description": "A list of DNS nameservers used by the OS.",
                        "items": {"type": "string", "pattern": IPV4_PATTERN},
                    },
                    "nodeprefix": {"type": ["string", "null"], "pattern": CIDR_PATTERN,
                                   "description": "The CIDR-formatted IP address range to be used by Nodes."},
                    "podprefix": {"type": ["string", "null"], "pattern": CIDR_PATTERN,
                                  "description": "The CIDR-formatted IP address range to be used by Pods."},
                    "serviceprefix": {"type": ["string", "null"], "pattern": CIDR_PATTERN,
                                      "description": "The CIDR-formatted IP address range to be used by Services."},
                },
            },
            "clusteropenstack": {
                "type": "object",
                "default": {},
                "additionalProperties": False,
                "properties": {
                    "computeaz": _string("OpenStack Compute Availability Zone.", default=DEFAULT_AVAILABILITY_ZONE),
                    "externalnetworkid": _nullable("string", "UUID of the external network."),
                    "sshkey": _nullable("string", "SSH key associated with the instance."),
                    "volumeaz": _string("OpenStack Cinder Availability Zone.", default=DEFAULT_AVAILABILITY_ZONE),
                },
            },
            "clusterfeatures": {
                "type": "object",
                "default": {},
                "additionalProperties": False,
                "properties": {
                    "autoscaling": _flag("Enables Cluster Autoscaler, required for autoscaling workload pools."),
                    "ingress": _flag("Whether to deploy an Ingress Controller (NGINX)."),
                    "longhorn": _flag("Whether to enable Longhorn for persistent storage, which includes support for RWX."),
                    "prometheus": _flag("Whether to enable the Prometheus Operator for monitoring."),
                    "dashboard": _flag("Whether to enable the Kubernetes Dashboard."),
                },
            },
            "workloadnodepools": {
                "type": "array",
                "default": [],
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "required": ["name", "flavor", "image", "replicas"],
                    "properties": {
                        "name": _string("Name of the workload pool.", minLength=1),
                        "disk": {"type": "integer", "minimum": 1, "default": DEFAULT_POOL_DISK,
                                 "description": "Size of disk for the node."},
                        **MACHINE_POOL_ATTRIBUTES,
                        "labels": {
                            "type": ["object", "null"],
                            "additionalProperties": {"type": "string"},
                            "description": "Kubernetes labels applied to each node in the pool.",
                        },
                        "version": _nullable("string"),
                        "autoscaling": {
                            "type": ["object", "null"],
                            "additionalProperties": False,
                            "required": ["minimum", "maximum"],
                            "properties": {
                                "minimum": {"type": "integer", "minimum": 0},
                                "maximum": {"type": "integer", "minimum": 0},
                            },
                        },
                    },
                },
            },
        },
    },
)

CLUSTER_DATA_SOURCE = ResourceSchema(
    type_name="eck_cluster",
    description="Look up an existing ECK cluster.",
    schema={
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": _string("The name of the ECK cluster.", minLength=1),
            "eckcp": _string("The ECK Control Plane of the cluster.", default=DEFAULT_CONTROL_PLANE),
        },
    },
)

KUBECONFIG_DATA_SOURCE = ResourceSchema(
    type_name="eck_kubeconfig",
    description="Fetch the kubeconfig of an ECK cluster.",
    computed=("kubeconfig",),
    schema={
        "type": "object",
        "additionalProperties": False,
        "required": ["cluster"],
        "properties": {
            "eckcp": _string("The ECK Control Plane of the cluster.", default=DEFAULT_CONTROL_PLANE),
            "cluster": _string("The name of the ECK cluster.", minLength=1),
            "kubeconfig": _nullable("string"),
        },
    },
)

CONTROL_PLANES_DATA_SOURCE = ResourceSchema(
    type_name="eck_controlplanes",
    description="A list of ECK Control Planes.",
    computed=("controlplanes",),
    schema={"type": "object", "properties": {}},
)
