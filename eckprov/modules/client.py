"""
ECK API client module for interacting with the ECK server.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..config import Config

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class ECKClient:
    """Thin client for the ECK control plane and cluster endpoints.

    Every call returns the raw ``requests.Response`` so callers decide which
    status codes they accept. Transport failures propagate as
    ``requests.RequestException``.
    """

    def __init__(
        self,
        host: str,
        token: str,
        insecure: bool = False,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the ECK client.

        Args:
            host: ECK API URL (e.g., 'https://eck.example.com')
            token: Project scoped bearer token
            insecure: Skip TLS verification
            timeout: Per request timeout in seconds
            session: Optional preconfigured session
        """
        self.host = host.rstrip('/')
        self.timeout = Config.API_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })
        self.session.verify = not insecure
        # set once the ECK API rejects the token, the owner re-authenticates
        self.unauthorized = False
        self.logger = logging.getLogger(f"{__name__}.ECKClient")

    def _url(self, *parts: str) -> str:
        return self.host + API_PREFIX + "".join("/" + quote(p, safe="") for p in parts)

    def _request(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> requests.Response:
        self.logger.debug("%s %s", method, url)
        response = self.session.request(method, url, json=body, timeout=self.timeout)
        if response.status_code == 401:
            self.logger.warning("%s %s rejected the bearer token", method, url)
            self.unauthorized = True
        self.logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    # Control planes

    def list_control_planes(self) -> requests.Response:
        return self._request("GET", self._url("controlplanes"))

    def create_control_plane(self, body: Dict[str, Any]) -> requests.Response:
        return self._request("POST", self._url("controlplanes"), body)

    def get_control_plane(self, name: str) -> requests.Response:
        return self._request("GET", self._url("controlplanes", name))

    def update_control_plane(self, name: str, body: Dict[str, Any]) -> requests.Response:
        return self._request("PUT", self._url("controlplanes", name), body)

    def delete_control_plane(self, name: str) -> requests.Response:
        return self._request("DELETE", self._url("controlplanes", name))

    # Clusters

    def create_cluster(self, control_plane: str, body: Dict[str, Any]) -> requests.Response:
        return self._request("POST", self._url("controlplanes", control_plane, "clusters"), body)

    def get_cluster(self, control_plane: str, name: str) -> requests.Response:
        return self._request("GET", self._url("controlplanes", control_plane, "clusters", name))

    def update_cluster(self, control_plane: str, name: str, body: Dict[str, Any]) -> requests.Response:
        return self._request("PUT", self._url("controlplanes", control_plane, "clusters", name), body)

    def delete_cluster(self, control_plane: str, name: str) -> requests.Response:
        return self._request("DELETE", self._url("controlplanes", control_plane, "clusters", name))

    def get_kubeconfig(self, control_plane: str, name: str) -> requests.Response:
        return self._request(
            "GET", self._url("controlplanes", control_plane, "clusters", name, "kubeconfig")
        )
