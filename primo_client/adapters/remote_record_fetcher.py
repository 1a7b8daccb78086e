"""Remote Record Adapter.

Fetches a single record by id through the transport port and narrows the
service's search-result envelope down to the record fragment. Primo wraps
even single-id lookups in a full search response:

    <sear:SEGMENTS xmlns:sear="http://www.exlibrisgroup.com/xsd/jaguar/search">
      <sear:JAGROOT><sear:RESULT><sear:DOCSET>
        <sear:DOC><PrimoNMBib xmlns="..."><record>...</record></PrimoNMBib></sear:DOC>
      </sear:DOCSET></sear:RESULT></sear:JAGROOT>
    </sear:SEGMENTS>
"""

import logging
from typing import Any, Optional

from primo_client.domain.ports import (
    PrimoError,
    RecordNotFoundError,
    TransportError,
    TransportPort,
)
from primo_client.infrastructure.xml_parser import SecureXMLParser

logger = logging.getLogger(__name__)

SEAR_NS = "http://www.exlibrisgroup.com/xsd/jaguar/search"


class RemoteRecordFetcher:
    """Thin adapter between the transport port and the record normalizer."""

    def __init__(self, transport: TransportPort, parser: Optional[SecureXMLParser] = None):
        """Initialize fetcher.

        Parameters:
            transport: Transport collaborator executing the lookup
            parser: Parser used when the transport returns str/bytes
        """
        self.transport = transport
        self.parser = parser or SecureXMLParser()

    def fetch_fragment(
        self,
        record_id: str,
        base_url: str,
        institution: str,
        vid: str,
    ) -> Any:
        """Fetch the record fragment for `record_id`.

        Parameters:
            record_id: Primo document id
            base_url: Base URL of the Primo installation
            institution: Primo institution code
            vid: Primo view id

        Returns:
            The lxml element of the record fragment

        Raises:
            TransportError: If the transport call fails
            RecordNotFoundError: If the envelope holds no record fragment
            MalformedXMLError: If the envelope cannot be parsed
        """
        logger.info(f"Fetching record {record_id} from {base_url}")
        try:
            envelope = self.transport.get_record_by_id(
                record_id, base_url, {"institution": institution, "vid": vid}
            )
        except PrimoError:
            raise
        except Exception as e:
            raise TransportError(
                f"Transport failed fetching record {record_id}: {str(e)}"
            ) from e

        if envelope is None:
            raise RecordNotFoundError(f"Empty response for record {record_id}", record_id=record_id)
        return self.extract_fragment(self.parser.ensure_element(envelope), record_id)

    @staticmethod
    def extract_fragment(envelope: Any, record_id: Optional[str] = None) -> Any:
        """Return the first record element inside the first sear:DOC of `envelope`."""
        doc = next(envelope.iter(f"{{{SEAR_NS}}}DOC"), None)
        if doc is None:
            logger.warning(f"No sear:DOC in response for record {record_id}")
            raise RecordNotFoundError(f"Record {record_id} not found", record_id=record_id)
        fragment = next(doc.iter("{*}record"), None)
        if fragment is None:
            logger.warning(f"sear:DOC without record element for record {record_id}")
            raise RecordNotFoundError(f"Record {record_id} not found", record_id=record_id)
        return fragment
