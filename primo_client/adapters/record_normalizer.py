"""Record Normalization Adapter.

This adapter turns a single Primo PNX record fragment into a validated,
immutable Record. It extracts display and control fields, derives the deep
link and the OpenURL, and produces cleaned raw XML for export.

Architecture:
    - Pure transformation: no network I/O, no shared mutable state
    - Field lookups are done within the fragment's own namespace
    - Missing optional fields yield None; only the record id is mandatory
"""

import copy
import logging
import re
from typing import Any, Optional, Type

from lxml import etree

from primo_client.domain.ports import MissingRecordIdError, MissingSetupParameterError
from primo_client.domain.record import DEFAULT_INSTITUTION, DEFAULT_VID, Record
from primo_client.infrastructure.xml_parser import SecureXMLParser

logger = logging.getLogger(__name__)

DEEP_LINK_PATH = "/primo_library/libweb/action/dlDisplay.do"

# attribute -> path, relative to the record element
FIELD_PATHS = {
    "record_id": "control/recordid",
    "type": "display/type",
    "title": "display/title",
    "creator": "display/creator",
}

_LINE_BREAK = re.compile(r"\n\s*")


def qualify(path: str, namespace: Optional[str]) -> str:
    """Prefix each step of a relative path with `namespace` in Clark notation."""
    if not namespace:
        return path
    return "/".join(f"{{{namespace}}}{step}" for step in path.split("/"))


def inner_text(element: Any) -> str:
    """Concatenated text content of an element and its descendants."""
    return "".join(element.itertext())


def clean_markup(markup: str) -> str:
    """Remove line breaks with their following whitespace, then trailing whitespace."""
    return _LINE_BREAK.sub("", markup).rstrip()


class RecordNormalizer:
    """Normalizes Primo record fragments into Record objects.

    Example Usage:
        ```python
        normalizer = RecordNormalizer()
        record = normalizer.normalize(
            fragment,
            base_url="http://primo.example.edu",
            resolver_base_url="http://resolver.example.edu/openurl",
            vid="NYU",
            institution="NYU",
        )
        record.url      # deep link
        record.openurl  # OpenURL for the resolver
        ```
    """

    def __init__(self, parser: Optional[SecureXMLParser] = None):
        """Initialize normalizer.

        Parameters:
            parser: Parser used for fragments given as str/bytes
        """
        self.parser = parser or SecureXMLParser()

    def normalize(
        self,
        fragment: Any,
        base_url: Optional[str],
        resolver_base_url: Optional[str] = None,
        vid: Optional[str] = DEFAULT_VID,
        institution: Optional[str] = DEFAULT_INSTITUTION,
        record_cls: Type[Record] = Record,
    ) -> Record:
        """Build a Record from a single record fragment.

        Parameters:
            fragment: Record element (lxml) or XML text
            base_url: Base URL of the Primo application
            resolver_base_url: Link resolver base URL (None for a bare querystring)
            vid: Primo view id
            institution: Primo institution code
            record_cls: Record class to instantiate (e.g. RemoteRecord)

        Returns:
            Record: Validated, immutable record

        Raises:
            MissingRecordIdError: If the fragment has no control/recordid
            MissingSetupParameterError: If base_url, institution or vid is None
            MalformedXMLError: If a textual fragment cannot be parsed
        """
        element = self.parser.ensure_element(fragment)
        fields = self.extract_fields(element)

        record_id = fields["record_id"]
        if record_id is None or not record_id.strip():
            raise MissingRecordIdError(
                "Record fragment has no control/recordid; every record must be addressable."
            )

        record = record_cls(
            record_id=record_id,
            type=fields["type"],
            title=fields["title"],
            creator=fields["creator"],
            url=self.construct_url(base_url, record_id, institution, vid),
            openurl=self.construct_openurl(resolver_base_url, element, record_id),
            raw_xml=self.raw(element),
        )
        logger.debug(f"Normalized record {record_id} ({record_cls.__name__})")
        return record

    def extract_fields(self, element: Any) -> dict[str, Optional[str]]:
        """Look up the control and display fields of a record.

        Returns:
            dict: attribute name -> text, or None where the element is absent
        """
        namespace = etree.QName(element).namespace
        fields = {}
        for name, path in FIELD_PATHS.items():
            found = element.find(qualify(path, namespace))
            fields[name] = inner_text(found) if found is not None else None
        return fields

    @staticmethod
    def construct_url(
        base_url: Optional[str],
        record_id: str,
        institution: Optional[str],
        vid: Optional[str],
    ) -> str:
        """Construct the deep link into the Primo UI for a record."""
        missing = [
            name for name, value in
            (("base_url", base_url), ("institution", institution), ("vid", vid))
            if value is None
        ]
        if missing:
            raise MissingSetupParameterError(missing, owner="RecordNormalizer")
        return (
            f"{base_url}{DEEP_LINK_PATH}?dym=false&onCampus=false"
            f"&docId={record_id}&institution={institution}&vid={vid}"
        )

    @staticmethod
    def construct_openurl(
        resolver_base_url: Optional[str],
        element: Any,
        record_id: str,
    ) -> str:
        """Construct the OpenURL from the record's addata section.

        Blank addata values are skipped. Without a resolver base URL only the
        querystring (starting with '?') is returned.
        """
        openurl = "?" if resolver_base_url is None else f"{resolver_base_url}?"
        namespace = etree.QName(element).namespace
        for addata in element.iterfind(qualify("addata", namespace)):
            for child in addata:
                if not isinstance(child.tag, str):
                    continue
                text = inner_text(child)
                if not text.strip():
                    continue
                openurl += f"rft.{etree.QName(child).localname}={text}&"
        return openurl + f"rft.primo={record_id}"

    @staticmethod
    def raw(element: Any) -> str:
        """Serialize the record's children under a plain <record> wrapper.

        Namespace declarations are dropped, as are line breaks with the
        indentation following them and trailing whitespace. Subclasses may
        override this to keep more of the original markup.
        """
        parts = ["<record>"]
        if element.text:
            parts.append(clean_markup(element.text))
        for child in element:
            tail = child.tail
            if isinstance(child.tag, str):
                child = _strip_namespaces(child)
            parts.append(clean_markup(etree.tostring(child, encoding="unicode", with_tail=False)))
            if tail:
                parts.append(clean_markup(tail))
        parts.append("</record>")
        return "".join(parts)


def _strip_namespaces(element: Any) -> Any:
    """Return a copy of `element` with every tag reduced to its local name."""
    stripped = copy.deepcopy(element)
    for node in stripped.iter():
        if isinstance(node.tag, str):
            node.tag = etree.QName(node).localname
    etree.cleanup_namespaces(stripped)
    return stripped
