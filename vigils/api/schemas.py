"""
Request and response models for the vigil API.
Wire keys are camelCase to match the browser client.
"""

import re
import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ..core.geocoder import is_valid_zipcode

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


class VigilFields(BaseModel):
    # Extra client fields (e.g. "type") are kept and stored with the record
    model_config = ConfigDict(extra="allow")

    zipcode: str
    location: str
    date: str
    time: str
    description: Optional[str] = None
    contact: Optional[str] = None
    organizerName: Optional[str] = None

    @field_validator('zipcode')
    @classmethod
    def zipcode_must_be_five_digits(cls, v):
        if not is_valid_zipcode(v):
            raise ValueError('zipcode must be 5 digits')
        return v

    @field_validator('location')
    @classmethod
    def location_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('location cannot be empty')
        return v

    @field_validator('date')
    @classmethod
    def date_must_be_iso(cls, v):
        if not DATE_PATTERN.match(v):
            raise ValueError('date must be YYYY-MM-DD')
        try:
            datetime.date.fromisoformat(v)
        except ValueError:
            raise ValueError('date must be YYYY-MM-DD')
        return v

    @field_validator('time')
    @classmethod
    def time_must_be_clock_time(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError('time must be HH:MM')
        return v


class CreateVigilRequest(BaseModel):
    data: VigilFields
    public: bool = True


class CreateVigilResponse(BaseModel):
    uuid: str
    vigil: Dict[str, Any]
    syncedTo: List[str]
    totalVigils: int


class VigilResponse(BaseModel):
    uuid: str
    data: Dict[str, Any]


class VigilSearchResponse(BaseModel):
    zipcode: str
    searchRadius: Union[int, float]
    vigils: List[Dict[str, Any]]
    count: int


class VigilDumpResponse(BaseModel):
    vigils: List[Dict[str, Any]]
    metadata: Dict[str, Any]
    bdoUserUUID: Optional[str] = None


class VigilCountResponse(BaseModel):
    total: int
    today: int


class DeleteVigilResponse(BaseModel):
    success: bool
    uuid: str
    syncedTo: List[str]
    remainingVigils: int


class HealthResponse(BaseModel):
    status: str
    version: str
    totalVigils: int
    remoteIdentity: Optional[str] = None
    endpoints: List[str]
