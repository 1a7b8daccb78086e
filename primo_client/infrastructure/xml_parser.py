"""Secure XML Parser.

This module parses record fragments and response envelopes with lxml while
applying defusedxml-style protections.

Security Impact:
    - Disables entity expansion and network access
    - Rejects huge trees (quadratic blowup)
    - Enforces a maximum nesting depth
    - Fails fast on malformed XML

Architecture:
    - Wraps lxml.etree.fromstring with a hardened XMLParser
    - Translates lxml errors into the package error hierarchy
"""

import logging
from typing import Any, Optional, Union

from lxml import etree
from lxml.etree import XMLParser

from primo_client.domain.ports import MalformedXMLError, XMLSecurityError

logger = logging.getLogger(__name__)


class SecureXMLParser:
    """Hardened lxml parser for Primo responses.

    Example Usage:
        ```python
        parser = SecureXMLParser(max_depth=50)
        element = parser.parse("<record><control/></record>")
        ```
    """

    def __init__(self, max_depth: int = 100, huge_tree: bool = False):
        """Initialize parser with security limits.

        Parameters:
            max_depth: Maximum XML nesting depth (prevents deep recursion)
            huge_tree: Allow huge XML trees (default: False for security)
        """
        self.max_depth = max_depth
        self.huge_tree = huge_tree

    def _create_parser(self, encoding: Optional[str] = None) -> XMLParser:
        """Create XML parser with security settings.

        Parameters:
            encoding: Overrides the document's encoding declaration when set

        Security Impact:
            - resolve_entities=False: Prevents entity expansion attacks
            - no_network=True: Prevents network access during parsing
            - huge_tree=False: Prevents quadratic blowup attacks
            - recover=False: Fail fast on malformed XML
        """
        return XMLParser(
            encoding=encoding,
            huge_tree=self.huge_tree,
            strip_cdata=False,
            resolve_entities=False,
            no_network=True,
            recover=False,
        )

    def _check_depth(self, root: Any) -> None:
        """Raise XMLSecurityError if any element is nested deeper than max_depth."""
        for _event, elem in etree.iterwalk(root, events=("start",)):
            depth = 0
            parent = elem.getparent()
            while parent is not None:
                depth += 1
                parent = parent.getparent()
            if depth > self.max_depth:
                raise XMLSecurityError(
                    f"XML depth limit exceeded: {depth} > {self.max_depth}. "
                    "This may indicate a malicious XML document."
                )

    def parse(self, source: Union[str, bytes]) -> Any:
        """Parse XML text into an lxml element.

        Parameters:
            source: XML document as str or bytes

        Returns:
            The root element

        Raises:
            MalformedXMLError: If the document is not well-formed
            XMLSecurityError: If security limits are exceeded
        """
        encoding = None
        if isinstance(source, str):
            # str input is already decoded; its encoding declaration no longer applies
            source = source.encode("utf-8")
            encoding = "utf-8"
        try:
            root = etree.fromstring(source, parser=self._create_parser(encoding))
        except etree.XMLSyntaxError as e:
            logger.warning(f"Rejected malformed XML: {str(e)}")
            raise MalformedXMLError(f"Invalid XML: {str(e)}") from e
        self._check_depth(root)
        return root

    def ensure_element(self, source: Any) -> Any:
        """Return `source` as an lxml element, parsing str/bytes input."""
        if isinstance(source, (str, bytes)):
            return self.parse(source)
        if not etree.iselement(source):
            raise MalformedXMLError(
                f"Expected XML text or an lxml element, got {type(source).__name__}"
            )
        return source
