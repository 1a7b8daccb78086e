"""Record Schema Definitions.

This module defines the normalized Primo record and the parameter bundle used
to construct one.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Models are immutable and validated before use
    - Construction logic (parsing, fetching, URL derivation) lives in adapters;
      the domain only states what a valid record looks like
"""

import json
from typing import Any, Optional

import xmltodict
from pydantic import BaseModel, ConfigDict, Field, model_validator

from primo_client.domain.ports import (
    ConflictingSetupParameterError,
    MissingSetupParameterError,
)

DEFAULT_VID = "DEFAULT"
DEFAULT_INSTITUTION = "PRIMO"


class RecordParameters(BaseModel):
    """Inbound parameter bundle for Record construction.

    Defaults for vid and institution only apply when the key is absent; an
    explicit None is treated as missing. Validation runs in a single pass and
    reports every missing parameter together.

    Parameters:
        base_url: Base URL of the Primo application (required)
        resolver_base_url: Base URL of the link resolver; when absent the
            OpenURL is a bare querystring
        vid: Primo view id
        institution: Primo institution code
        record_id: Identifier of a record to fetch remotely
        record: In-memory XML fragment (lxml element, str or bytes)
    """

    base_url: Optional[str] = None
    resolver_base_url: Optional[str] = None
    vid: Optional[str] = DEFAULT_VID
    institution: Optional[str] = DEFAULT_INSTITUTION
    record_id: Optional[str] = None
    record: Optional[Any] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def check_required(self) -> "RecordParameters":
        """Collect every missing setup parameter and fail once."""
        missing = [
            name for name in ("base_url", "vid", "institution")
            if getattr(self, name) is None
        ]
        if self.record is None and self.record_id is None:
            missing.append("record or record_id")
        if missing:
            raise MissingSetupParameterError(missing, owner="Record")
        if self.record is not None and self.record_id is not None:
            raise ConflictingSetupParameterError(["record", "record_id"])
        return self


class Record(BaseModel):
    """Normalized Primo record.

    Parameters:
        record_id: Primo document id (control/recordid)
        type: Resource type (display/type)
        title: Display title (display/title)
        creator: Display creator (display/creator)
        url: Deep link into the Primo UI
        openurl: Citation-linking OpenURL (or bare querystring)
        raw_xml: Cleaned record XML wrapped in <record>
    """

    record_id: str = Field(..., min_length=1, description="Primo document id")
    type: Optional[str] = Field(None, description="Resource type")
    title: Optional[str] = Field(None, description="Display title")
    creator: Optional[str] = Field(None, description="Display creator")
    url: str = Field(..., description="Deep link to the record")
    openurl: str = Field(..., description="OpenURL for the link resolver")
    raw_xml: str = Field(..., description="Cleaned raw XML")

    model_config = ConfigDict(frozen=True)

    @property
    def format(self) -> Optional[str]:
        """Capitalized type, or None when the record has no type."""
        return self.type.capitalize() if self.type is not None else None

    def to_dict(self) -> dict[str, Optional[str]]:
        """Return the primary record attributes.

        Subclasses adding attributes should extend this mapping.
        """
        return {
            "format": self.format,
            "title": self.title,
            "author": self.creator,
            "url": self.url,
            "openurl": self.openurl,
        }

    def raw_dict(self) -> dict[str, Any]:
        """Return raw_xml converted to nested dictionaries keyed by element name."""
        return xmltodict.parse(self.raw_xml)

    def to_json(self) -> str:
        """Return a JSON representation of the raw record XML.

        This is built from raw_xml, not from to_dict().
        """
        return json.dumps(self.raw_dict())


class RemoteRecord(Record):
    """A Record whose fragment was fetched by id through the transport port.

    Identical fields and construction contract; exists so callers can
    specialize behaviour for remotely sourced records.
    """
    pass
