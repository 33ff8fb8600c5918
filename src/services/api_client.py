# src/services/api_client.py

import logging
from typing import Any, Dict, Optional

import requests

from services.credentials import CredentialProvider
from services.errors import NetworkError

logger = logging.getLogger(__name__)


def _server_message(resp: requests.Response) -> Optional[str]:
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
        # Some backend routes wrap it as {"meta": {"message": ...}}
        meta = payload.get("meta")
        if isinstance(meta, dict) and isinstance(meta.get("message"), str):
            return meta["message"].strip() or None
    return None


class BackendApiClient:
    """
    Minimal JSON REST client for the logistics backend.

    Every call carries `Authorization: Bearer <token>` when the credential
    provider has a token. Failures surface as NetworkError; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        timeout_seconds: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        fallback_message: str = "request failed",
    ) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise NetworkError(fallback_message) from e

        if not 200 <= resp.status_code < 300:
            message = _server_message(resp) or fallback_message
            logger.warning("%s %s -> %s: %s", method, url, resp.status_code, message)
            raise NetworkError(message, status_code=resp.status_code)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.error("%s %s returned a non-JSON body", method, url)
            raise NetworkError(fallback_message, status_code=resp.status_code) from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)
