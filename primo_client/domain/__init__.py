"""Domain layer for the Primo client.

This module contains the record schema, the request variant registry and the
ports/error hierarchy. Domain models depend on nothing beyond Pydantic and
xmltodict.
"""

from .record import Record, RecordParameters, RemoteRecord
from .request_variants import ElementSetRegistry, RequestVariant, create_default_registry

__all__ = [
    "Record",
    "RecordParameters",
    "RemoteRecord",
    "ElementSetRegistry",
    "RequestVariant",
    "create_default_registry",
]
