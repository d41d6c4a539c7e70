"""
Core data types: vigil records, snapshots, coordinates, credentials and
per-endpoint replication outcomes.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Wire keys owned by the record itself; anything else the client sends is kept in `extra`.
RECORD_FIELDS = (
    "uuid", "zipcode", "location", "date", "time",
    "description", "contact", "organizerName", "createdAt",
)

DEFAULT_ORGANIZER = "Anonymous"


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lon: float


@dataclass
class VigilRecord:
    uuid: str
    zipcode: str
    location: str
    date: str
    time: str
    created_at: int
    description: Optional[str] = None
    contact: Optional[str] = None
    organizer_name: str = DEFAULT_ORGANIZER
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to its camelCase wire form."""
        data = copy.deepcopy(self.extra)
        data.update({
            "zipcode": self.zipcode,
            "location": self.location,
            "date": self.date,
            "time": self.time,
            "description": self.description,
            "contact": self.contact,
            "organizerName": self.organizer_name,
            "uuid": self.uuid,
            "createdAt": self.created_at,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VigilRecord':
        """Create a record from its wire form (e.g. a pulled snapshot)."""
        extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in RECORD_FIELDS}
        return cls(
            uuid=data["uuid"],
            zipcode=data["zipcode"],
            location=data.get("location", ""),
            date=data.get("date", ""),
            time=data.get("time", ""),
            created_at=int(data.get("createdAt") or 0),
            description=data.get("description"),
            contact=data.get("contact"),
            organizer_name=data.get("organizerName") or DEFAULT_ORGANIZER,
            extra=extra,
        )


@dataclass
class SnapshotMetadata:
    last_updated: Optional[int] = None
    total_vigils: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"lastUpdated": self.last_updated, "totalVigils": self.total_vigils}


@dataclass
class IdentityCredential:
    """Durable keypair plus the remote identifier assigned by the storage endpoints."""
    private_key: str
    public_key: str
    uuid: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"privateKey": self.private_key, "pubKey": self.public_key}
        if self.uuid:
            data["uuid"] = self.uuid
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IdentityCredential':
        return cls(
            private_key=data["privateKey"],
            public_key=data["pubKey"],
            uuid=data.get("uuid"),
        )


@dataclass
class EndpointOutcome:
    server: str
    success: bool
    error: Optional[str] = None
    uuid: Optional[str] = None
    existing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {"server": self.server, "success": self.success}
        if self.error:
            data["error"] = self.error
        if self.uuid:
            data["uuid"] = self.uuid
        if self.existing:
            data["existing"] = True
        return data


@dataclass
class RankedVigil:
    record: VigilRecord
    distance: float

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["distance"] = self.distance
        return data


def succeeded(outcomes: List[EndpointOutcome]) -> List[EndpointOutcome]:
    """Return the outcomes of endpoints that accepted the operation."""
    return [outcome for outcome in outcomes if outcome.success]
