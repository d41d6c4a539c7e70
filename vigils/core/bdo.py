"""
Client for one remote BDO storage endpoint.

Each endpoint stores public JSON objects addressed by (user uuid, hash).
Every request is signed with the service's private key.
"""

import time
from typing import Any, Dict, Optional

import requests

from . import config
from .identity import sign_message
from .schema import IdentityCredential


class BDOError(Exception):
    """Raised when a storage endpoint rejects or fails a request."""
    pass


class BDOClient:
    """Signed requests against a single endpoint."""

    def __init__(self, server_url: str, timeout: float = None, session: requests.Session = None):
        self.server_url = server_url.rstrip("/")
        self.base_url = self.server_url + "/"
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SEC
        self.session = session or requests.Session()

    def __repr__(self):
        return f"BDOClient({self.server_url!r})"

    @staticmethod
    def _timestamp() -> str:
        return str(int(time.time() * 1000))

    def _send(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = self.base_url + path
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise BDOError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise BDOError(f"{method} {url} returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise BDOError(f"{method} {url} returned malformed JSON") from e

        if not isinstance(body, dict):
            raise BDOError(f"{method} {url} returned unexpected payload")
        return body

    def create_user(self, credential: IdentityCredential, hash_: str, bdo: Dict[str, Any]) -> str:
        """Register the credential's public key and return the assigned user uuid."""
        timestamp = self._timestamp()
        payload = {
            "timestamp": timestamp,
            "pubKey": credential.public_key,
            "hash": hash_,
            "bdo": bdo,
            "signature": sign_message(credential.private_key, timestamp + credential.public_key + hash_),
        }
        body = self._send("PUT", "user/create", json=payload)
        user_uuid = body.get("uuid")
        if not user_uuid:
            raise BDOError(f"{self.server_url} did not return a user uuid")
        return user_uuid

    def update_bdo(self, credential: IdentityCredential, user_uuid: str, hash_: str,
                   bdo: Dict[str, Any], public: bool = True) -> Dict[str, Any]:
        """Overwrite the stored object for (user_uuid, hash)."""
        timestamp = self._timestamp()
        payload = {
            "timestamp": timestamp,
            "uuid": user_uuid,
            "hash": hash_,
            "bdo": bdo,
            "pub": public,
            "signature": sign_message(credential.private_key, timestamp + user_uuid + hash_),
        }
        return self._send("PUT", f"user/{user_uuid}/bdo", json=payload)

    def get_bdo(self, credential: IdentityCredential, user_uuid: str, hash_: str) -> Optional[Dict[str, Any]]:
        """Fetch the stored object, or None when the endpoint has none."""
        timestamp = self._timestamp()
        params = {
            "timestamp": timestamp,
            "hash": hash_,
            "signature": sign_message(credential.private_key, timestamp + user_uuid + hash_),
        }
        body = self._send("GET", f"user/{user_uuid}/bdo", params=params)
        bdo = body.get("bdo")
        return bdo if isinstance(bdo, dict) else None
