"""
Replicates the full vigil snapshot to every configured storage endpoint.

There is exactly one remote object (the snapshot) per endpoint. Pushes
overwrite it wholesale; pulls take the first endpoint that answers, in
configured order, without merging. Endpoints may disagree after a partial
push failure.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .bdo import BDOClient, BDOError
from .identity import IdentityStore, new_credential
from .schema import EndpointOutcome, IdentityCredential, succeeded
from util.logging import logger


def build_endpoints(servers: Sequence[str] = None, timeout: float = None) -> List[BDOClient]:
    """One client per configured server URL."""
    if servers is None:
        servers = config.get_bdo_servers()
    return [BDOClient(server, timeout=timeout) for server in servers]


class ReplicationCoordinator:
    """Bootstrap, push and pull of the shared snapshot."""

    def __init__(self, endpoints: Sequence[Any], identity_store: IdentityStore, hash_: str = None):
        self.endpoints = list(endpoints)
        self.identity_store = identity_store
        self.hash = hash_ or config.VIGILS_HASH
        self._credential: Optional[IdentityCredential] = None
        self._sync_lock = threading.Lock()

    @staticmethod
    def _server(endpoint) -> str:
        return getattr(endpoint, "server_url", repr(endpoint))

    @property
    def credential(self) -> Optional[IdentityCredential]:
        return self._credential

    @property
    def remote_identity(self) -> Optional[str]:
        return self._credential.uuid if self._credential else None

    @property
    def has_identity(self) -> bool:
        return self.remote_identity is not None

    @property
    def servers(self) -> List[str]:
        return [self._server(endpoint) for endpoint in self.endpoints]

    def bootstrap(self, credential: IdentityCredential = None,
                  initial_snapshot: Dict[str, Any] = None) -> List[EndpointOutcome]:
        """
        Adopt an existing remote identity or create one.

        Args:
            credential: Credential to use; loaded from the identity store when omitted.
            initial_snapshot: Object stored on endpoints where a new identity is created.

        Returns:
            One outcome per endpoint. When every outcome failed the
            coordinator stays without an identity (degraded mode).
        """
        if credential is None:
            credential = self.identity_store.load()

        if credential is not None and credential.uuid:
            self._credential = credential
            logger.info(f"Using existing remote identity: {credential.uuid}")
            return [
                EndpointOutcome(server=server, success=True, uuid=credential.uuid, existing=True)
                for server in self.servers
            ]

        if credential is None:
            # Persist the keypair before any remote call so a crash mid-bootstrap reuses it
            credential = self.identity_store.save(new_credential())

        if initial_snapshot is None:
            initial_snapshot = {"vigils": {}, "metadata": {"lastUpdated": None, "totalVigils": 0}}

        outcomes = []
        for endpoint in self.endpoints:
            server = self._server(endpoint)
            try:
                user_uuid = endpoint.create_user(credential, self.hash, initial_snapshot)
            except BDOError as e:
                logger.log_replication_outcome("bootstrap", server, False, str(e))
                outcomes.append(EndpointOutcome(server=server, success=False, error=str(e)))
                continue

            if self._credential is None:
                self._credential = self.identity_store.save(credential, user_uuid)
            logger.log_replication_outcome("bootstrap", server, True)
            outcomes.append(EndpointOutcome(server=server, success=True, uuid=user_uuid))

        logger.log_replication_summary("bootstrap", outcomes)
        return outcomes

    def _push_one(self, endpoint, snapshot: Dict[str, Any]) -> EndpointOutcome:
        server = self._server(endpoint)
        try:
            endpoint.update_bdo(self._credential, self._credential.uuid, self.hash, snapshot, True)
        except BDOError as e:
            logger.log_replication_outcome("push", server, False, str(e))
            return EndpointOutcome(server=server, success=False, error=str(e))

        logger.log_replication_outcome("push", server, True)
        return EndpointOutcome(server=server, success=True)

    def push(self, snapshot: Dict[str, Any]) -> List[EndpointOutcome]:
        """
        Send the full snapshot to every endpoint concurrently.

        Returns per-endpoint outcomes in configured order; an empty list when
        no remote identity exists yet.
        """
        if not self.has_identity:
            logger.warning("No remote identity, skipping push")
            return []

        if not self.endpoints:
            return []

        with ThreadPoolExecutor(max_workers=len(self.endpoints)) as pool:
            outcomes = list(pool.map(lambda endpoint: self._push_one(endpoint, snapshot), self.endpoints))

        logger.log_replication_summary("push", outcomes)
        return outcomes

    def replicate(self, store) -> List[EndpointOutcome]:
        """Snapshot the store and push it; concurrent callers are serialized."""
        with self._sync_lock:
            return self.push(store.snapshot())

    def pull(self) -> Optional[Dict[str, Any]]:
        """Return the first snapshot found, querying endpoints in configured order."""
        if not self.has_identity:
            logger.info("No remote identity yet, skipping load")
            return None

        for endpoint in self.endpoints:
            server = self._server(endpoint)
            try:
                snapshot = endpoint.get_bdo(self._credential, self._credential.uuid, self.hash)
            except BDOError as e:
                logger.log_replication_outcome("pull", server, False, str(e))
                continue

            if snapshot:
                count = len(snapshot.get("vigils") or {})
                logger.log_replication_outcome("pull", server, True)
                logger.info(f"Loaded {count} vigils from {server}")
                return snapshot

        logger.info("No vigils found on any endpoint, starting fresh")
        return None


def sync_succeeded(outcomes: List[EndpointOutcome]) -> bool:
    """Overall success means at least one endpoint accepted the push."""
    return len(succeeded(outcomes)) > 0
