"""Shared plumbing for resources and data sources backed by the ECK API."""
import logging
from typing import Callable, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .client import ECKClient
from .diagnostics import Diagnostics
from .wait import ResourceIdentifier

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def describe_response(response: requests.Response) -> str:
    reason = f" {response.reason}" if getattr(response, "reason", None) else ""
    text = (response.text or "").strip()
    return f"{response.status_code}{reason}" + (f": {text}" if text else "")


class APIBacked:
    """Base class holding the provider configured client."""

    def __init__(self, client: ECKClient):
        self.client = client

    @staticmethod
    def call(
        diagnostics: Diagnostics,
        summary: str,
        detail: str,
        fn: Callable[..., requests.Response],
        *args,
    ) -> Optional[requests.Response]:
        """Run a client call, turning transport failures into an error diagnostic."""
        try:
            return fn(*args)
        except requests.RequestException as e:
            diagnostics.add_error(summary, f"{detail}, unexpected error: {e}")
            return None

    @staticmethod
    def decode(diagnostics: Diagnostics, response: requests.Response, model: Type[M], what: str) -> Optional[M]:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            diagnostics.add_error(
                f"Unable to read {what} information",
                f"An error occurred while parsing the response from the ECK API. JSON Error: {e}",
            )
            return None

    def fetch_kubeconfig(self, identifier: ResourceIdentifier, diagnostics: Diagnostics) -> Optional[str]:
        """Kubeconfig of a provisioned cluster, None with a warning if unavailable."""
        try:
            response = self.client.get_kubeconfig(identifier.control_plane, identifier.name)
        except requests.RequestException as e:
            diagnostics.add_warning("Unable to fetch kubeconfig", f"Cluster {identifier}: {e}")
            return None
        if response.status_code != 200:
            diagnostics.add_warning(
                "Unable to fetch kubeconfig",
                f"Cluster {identifier}: unexpected response from ECK API: {describe_response(response)}",
            )
            return None
        return response.text
