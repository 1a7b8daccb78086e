"""Primo client entry point.

Wires the adapters together: validates the record parameter bundle, chooses
between an in-memory fragment and a remote lookup, and normalizes the result.
Also exposes request-payload building over the variant registry.

Architecture:
    - Follows Hexagonal Architecture principles
    - The transport collaborator is injected; this module does no network I/O
    - Configuration defaults come from PrimoConfig when the caller omits a key
"""

import logging
from typing import Any, Mapping, Optional, Type

from primo_client.adapters.record_normalizer import RecordNormalizer
from primo_client.adapters.remote_record_fetcher import RemoteRecordFetcher
from primo_client.adapters.request_builder import RequestBuilder
from primo_client.domain.ports import ConfigurationError, TransportPort
from primo_client.domain.record import Record, RecordParameters, RemoteRecord
from primo_client.domain.request_variants import ElementSetRegistry
from primo_client.infrastructure.config_manager import PrimoConfig
from primo_client.infrastructure.settings import settings
from primo_client.infrastructure.xml_parser import SecureXMLParser

logger = logging.getLogger(__name__)


class PrimoClient:
    """Facade for building requests and normalizing Primo records.

    Example Usage:
        ```python
        client = PrimoClient(transport=my_transport, config=get_primo_config())
        record = client.record(record=fragment)
        remote = client.remote_record(record_id="dedupmrg17343091")
        payload = client.build_request("GetTags", {"user_id": "N1", "doc_id": "D1"})
        ```
    """

    def __init__(
        self,
        transport: Optional[TransportPort] = None,
        config: Optional[PrimoConfig] = None,
        registry: Optional[ElementSetRegistry] = None,
        parser: Optional[SecureXMLParser] = None,
    ):
        """Initialize client.

        Parameters:
            transport: Transport collaborator for lookups by record id
            config: Defaults for base_url, resolver_base_url, vid and institution
                (defaults to the PRIMO_* environment settings)
            registry: Request variant registry (defaults to the tag operations)
            parser: XML parser (defaults to PRIMO_XML_MAX_DEPTH limits)
        """
        self.transport = transport
        self.config = config if config is not None else settings.primo_config
        self.parser = parser or SecureXMLParser(max_depth=settings.xml_max_depth)
        self.normalizer = RecordNormalizer(parser=self.parser)
        self.builder = RequestBuilder(registry=registry)

    def _parameters(self, parameters: Mapping[str, Any]) -> RecordParameters:
        """Merge config defaults under `parameters` and validate the bundle."""
        merged = dict(self.config.record_defaults())
        merged.update(parameters)
        return RecordParameters(**merged)

    def record(self, record_cls: Type[Record] = Record, **parameters: Any) -> Record:
        """Construct a record from a parameter bundle.

        Parameters:
            record_cls: Record class to build
            **parameters: base_url, resolver_base_url, vid, institution and
                exactly one of record / record_id

        Returns:
            Record: The normalized record

        Raises:
            MissingSetupParameterError: If required parameters are missing
            ConflictingSetupParameterError: If both record and record_id are given
            ConfigurationError: If record_id is given without a transport
        """
        params = self._parameters(parameters)

        if params.record is not None:
            fragment = params.record
        else:
            if self.transport is None:
                raise ConfigurationError(
                    f"A transport is required to fetch record {params.record_id}"
                )
            fetcher = RemoteRecordFetcher(self.transport, parser=self.parser)
            fragment = fetcher.fetch_fragment(
                params.record_id, params.base_url, params.institution, params.vid
            )

        return self.normalizer.normalize(
            fragment,
            base_url=params.base_url,
            resolver_base_url=params.resolver_base_url,
            vid=params.vid,
            institution=params.institution,
            record_cls=record_cls,
        )

    def remote_record(self, **parameters: Any) -> RemoteRecord:
        """Construct a RemoteRecord; same contract as record()."""
        return self.record(record_cls=RemoteRecord, **parameters)

    def build_request(self, variant: str, values: Mapping[str, Optional[str]]) -> str:
        """Build the request payload for a registered variant."""
        return self.builder.build(variant, values)
