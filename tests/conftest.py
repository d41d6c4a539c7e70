"""
Shared fixtures: fake storage endpoints, a fixed zipcode gazetteer and a
ready-to-use AppState that never touches the network.
"""

import copy
import os

# Keep module-level app construction away from real endpoints
os.environ.setdefault("BOOTSTRAP_ON_STARTUP", "false")

import pytest

from vigils.core.bdo import BDOError
from vigils.core.geocoder import CoordinateResolver, GeocodingError
from vigils.core.identity import IdentityStore, new_credential
from vigils.core.replication import ReplicationCoordinator
from vigils.core.schema import Coordinate
from vigils.core.state import AppState
from vigils.core.store import VigilStore

ZIP_COORDINATES = {
    # Minneapolis: George Floyd Square and a neighbouring zipcode ~3 miles east
    "55408": Coordinate(44.9466, -93.2862),
    "55406": Coordinate(44.9384, -93.2211),
    # Rochester, MN, ~75 miles south-east of Minneapolis
    "55901": Coordinate(44.0495, -92.4893),
    # Synthetic points due north of 50000
    "50000": Coordinate(45.0, -93.0),
    "50001": Coordinate(45.01, -93.0),
    "50002": Coordinate(45.05, -93.0),
    "50003": Coordinate(45.1, -93.0),
    "50004": Coordinate(45.5, -93.0),
}


def gazetteer_lookup(zipcode):
    """Lookup function backed by ZIP_COORDINATES."""
    if zipcode not in ZIP_COORDINATES:
        raise GeocodingError(f"unknown zipcode {zipcode}")
    return ZIP_COORDINATES[zipcode]


class FakeEndpoint:
    """In-memory stand-in for a BDOClient."""

    def __init__(self, server_url, fail=False, user_uuid="remote-user-1", stored=None):
        self.server_url = server_url
        self.fail = fail
        self.user_uuid = user_uuid
        self.stored = stored
        self.create_calls = []
        self.pushes = []
        self.fetches = 0

    def create_user(self, credential, hash_, bdo):
        self.create_calls.append((credential.public_key, hash_))
        if self.fail:
            raise BDOError(f"{self.server_url} unavailable")
        self.stored = copy.deepcopy(bdo)
        return self.user_uuid

    def update_bdo(self, credential, user_uuid, hash_, bdo, public=True):
        if self.fail:
            raise BDOError(f"{self.server_url} unavailable")
        self.stored = copy.deepcopy(bdo)
        self.pushes.append(self.stored)
        return {"uuid": user_uuid}

    def get_bdo(self, credential, user_uuid, hash_):
        self.fetches += 1
        if self.fail:
            raise BDOError(f"{self.server_url} unavailable")
        return copy.deepcopy(self.stored)


@pytest.fixture
def endpoints():
    return [
        FakeEndpoint("https://a.bdo.test"),
        FakeEndpoint("https://b.bdo.test"),
        FakeEndpoint("https://c.bdo.test"),
    ]


@pytest.fixture
def identity_store(tmp_path):
    return IdentityStore(tmp_path / "bdo-keys.json")


@pytest.fixture
def resolver():
    return CoordinateResolver(lookup=gazetteer_lookup)


@pytest.fixture
def admin_keys():
    """(private_key_hex, public_key_hex) for signing admin requests."""
    credential = new_credential()
    return credential.private_key, credential.public_key


@pytest.fixture
def app_state(endpoints, identity_store, resolver, admin_keys):
    """AppState with an adopted remote identity on three fake endpoints."""
    credential = new_credential()
    credential.uuid = "remote-user-1"
    replicator = ReplicationCoordinator(endpoints, identity_store, hash_="test-vigils")
    replicator.bootstrap(credential)

    return AppState(
        store=VigilStore(),
        resolver=resolver,
        zipcode_client=None,
        replicator=replicator,
        admin_public_key=admin_keys[1],
        search_radius_miles=10.0,
    )
