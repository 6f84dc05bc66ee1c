"""Token acquisition for the ECK API."""
import logging
from typing import Optional

import requests

from ..config import Config
from .errors import AuthenticationError, ECKConnectionError

logger = logging.getLogger(__name__)

PASSWORD_TOKEN_PATH = "/api/v1/auth/tokens/password"
SCOPED_TOKEN_PATH = "/api/v1/auth/tokens/token"


def _token_from(response: requests.Response, what: str) -> str:
    if response.status_code not in (200, 201):
        raise AuthenticationError(
            f"{what} request rejected with HTTP {response.status_code}: {response.text.strip()}"
        )
    try:
        token = response.json()["token"]
    except (ValueError, KeyError, TypeError) as e:
        raise AuthenticationError(f"{what} response did not contain a token: {e}") from e
    if not token:
        raise AuthenticationError(f"{what} response contained an empty token")
    return token


def get_token(
    host: str,
    username: str,
    password: str,
    project: str,
    insecure: bool = False,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Issue a project scoped token.

    The password grant returns an unscoped token which is then exchanged for
    one scoped to the OpenStack project.

    Args:
        host: Base URL of the ECK API
        username: ECK username
        password: ECK password
        project: OpenStack project UUID
        insecure: Skip TLS verification
        session: Optional session to reuse

    Returns:
        The scoped bearer token
    """
    session = session or requests.Session()
    base = host.rstrip('/')
    verify = not insecure

    logger.debug("Requesting unscoped token for %s from %s", username, base)
    try:
        response = session.post(
            base + PASSWORD_TOKEN_PATH,
            auth=(username, password),
            timeout=Config.API_TIMEOUT,
            verify=verify,
        )
        unscoped = _token_from(response, "password token")

        logger.debug("Scoping token to project %s", project)
        response = session.post(
            base + SCOPED_TOKEN_PATH,
            json={"project": {"id": project}},
            headers={"Authorization": f"Bearer {unscoped}"},
            timeout=Config.API_TIMEOUT,
            verify=verify,
        )
        return _token_from(response, "scoped token")
    except requests.RequestException as e:
        raise ECKConnectionError(f"Unable to reach ECK API at {base}: {e}") from e
