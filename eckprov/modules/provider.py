"""
ECK provider: configuration, authentication and wiring of resources.

A provider session builds one ``ECKClient`` during ``configure`` and hands it to
every resource and data source it creates. Nothing is shared through module
state, so several providers (for different projects) can live side by side.
"""
import logging
import os
from typing import Callable, Dict, Optional

from ..config import Config
from ..utils import redact_sensitive_data
from .auth import get_token
from .client import ECKClient
from .datasources import ClusterDataSource, ControlPlanesDataSource, KubeconfigDataSource
from .diagnostics import Diagnostics
from .errors import ECKError
from .resources import ClusterResource, ControlPlaneResource

logger = logging.getLogger(__name__)

TYPE_NAME = "eck"

SETTINGS = {
    "host": ("ECK_HOST", "Host"),
    "username": ("ECK_USERNAME", "Username"),
    "password": ("ECK_PASSWORD", "Password"),
    "project": ("ECK_PROJECT", "Project"),
}


class ECKProvider:
    """The ``eck`` provider.

    Args:
        version: provider version, "dev" for local builds
        token_source: callable with the signature of ``auth.get_token``
    """

    def __init__(self, version: str = "dev", token_source: Callable[..., str] = get_token):
        self.version = version
        self.token_source = token_source
        self.client: Optional[ECKClient] = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def configure(
        self,
        host: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        project: Optional[str] = None,
        insecure: Optional[bool] = None,
    ) -> Diagnostics:
        """Prepare an API client for data sources and resources.

        Explicit arguments win over the ``ECK_*`` environment variables.
        """
        logger.info("🦄 Configuring ECK client")
        diagnostics = Diagnostics()

        given = {"host": host, "username": username, "password": password, "project": project}
        values: Dict[str, str] = {}
        for key, (env_var, label) in SETTINGS.items():
            value = given[key] if given[key] is not None else os.getenv(env_var, "")
            values[key] = value
            if not value:
                diagnostics.add_attribute_error(
                    key,
                    f"Missing ECK API {label}",
                    f"The provider cannot create the ECK API client as there is a missing or empty value "
                    f"for the ECK API {label.lower()}. Set the {key} value in the configuration or use the "
                    f"{env_var} environment variable. If either is already set, ensure the value is not empty.",
                )

        if diagnostics.has_error():
            return diagnostics

        if insecure is None:
            insecure = os.getenv("ECK_INSECURE", str(Config.ECK_INSECURE)).strip().lower() in ("1", "true", "yes", "on")

        logger.debug("Creating ECK client with %s", redact_sensitive_data(values))

        try:
            token = self.token_source(
                values["host"], values["username"], values["password"], values["project"], insecure
            )
        except ECKError as e:
            diagnostics.add_error(
                "Unable to Create ECK API Client",
                "An unexpected error occurred when creating the ECK API client. "
                "If the error is not clear, please contact the provider developers.\n\n"
                f"ECK Client Error: {e}",
            )
            return diagnostics

        self.client = ECKClient(values["host"], token, insecure=insecure)
        logger.info("Configured ECK client for %s", values["host"])
        return diagnostics

    def resources(self) -> Dict[str, type]:
        return {
            f"{TYPE_NAME}_controlplane": ControlPlaneResource,
            f"{TYPE_NAME}_cluster": ClusterResource,
        }

    def data_sources(self) -> Dict[str, type]:
        return {
            f"{TYPE_NAME}_controlplanes": ControlPlanesDataSource,
            f"{TYPE_NAME}_cluster": ClusterDataSource,
            f"{TYPE_NAME}_kubeconfig": KubeconfigDataSource,
        }

    def resource(self, type_name: str, **kwargs):
        """Instantiate a resource bound to this provider's client."""
        return self._build(self.resources(), type_name, "resource", **kwargs)

    def data_source(self, type_name: str, **kwargs):
        """Instantiate a data source bound to this provider's client."""
        return self._build(self.data_sources(), type_name, "data source", **kwargs)

    def _build(self, registry: Dict[str, type], type_name: str, kind: str, **kwargs):
        if type_name not in registry:
            raise KeyError(f"Unknown {kind} type: {type_name}")
        if self.client is None:
            raise ECKError(f"Provider must be configured before creating {kind} {type_name}")
        return registry[type_name](self.client, **kwargs)
