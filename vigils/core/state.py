"""
Application state container handed to request handlers.

Nothing here is a module-level singleton: the API builds one `AppState`
per app instance, and tests build their own with fake collaborators.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from . import config
from .geocoder import CoordinateResolver, ZippopotamClient
from .identity import IdentityStore
from .replication import ReplicationCoordinator, build_endpoints
from .schema import EndpointOutcome, succeeded
from .store import VigilStore
from util.logging import logger


@dataclass
class AppState:
    store: VigilStore
    resolver: CoordinateResolver
    zipcode_client: ZippopotamClient
    replicator: ReplicationCoordinator
    admin_public_key: str
    search_radius_miles: float = 10.0

    def startup(self) -> List[EndpointOutcome]:
        """
        Bootstrap the remote identity and hydrate the store.

        Pull only happens when at least one endpoint is usable; a missing
        remote snapshot leaves the store empty.
        """
        logger.info("Initializing storage endpoints...")
        outcomes = self.replicator.bootstrap(initial_snapshot=self.store.snapshot())

        ready = succeeded(outcomes)
        if not ready:
            logger.error("Failed to initialize any storage endpoint, running in degraded mode")
            return outcomes

        logger.info(f"Successfully initialized {len(ready)}/{len(outcomes)} storage endpoints")
        snapshot = self.replicator.pull()
        if snapshot is not None:
            self.store.restore(snapshot)
        return outcomes

    def describe(self) -> Dict[str, Any]:
        return {
            "remoteIdentity": self.replicator.remote_identity,
            "endpoints": self.replicator.servers,
            "totalVigils": self.store.count(),
        }


def build_state() -> AppState:
    """Build the production state from configuration."""
    zipcode_client = ZippopotamClient()
    return AppState(
        store=VigilStore(),
        resolver=CoordinateResolver(lookup=zipcode_client.lookup),
        zipcode_client=zipcode_client,
        replicator=ReplicationCoordinator(
            endpoints=build_endpoints(),
            identity_store=IdentityStore(config.get_keys_file()),
        ),
        admin_public_key=config.ADMIN_PUBKEY,
        search_radius_miles=config.SEARCH_RADIUS_MILES,
    )
