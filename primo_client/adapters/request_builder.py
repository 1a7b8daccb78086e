"""Request Payload Builder.

Serializes the resolved element set of a request variant into the XML request
document expected by the Primo web services. Element order is significant: the
service validates requests against a schema, so children are written in the
variant's declared order.

Wire format:
    <getTagsRequest xmlns="http://www.exlibris.com/primo/xsd/wsRequest">
      <userId>...</userId>
      <docId>...</docId>
    </getTagsRequest>
"""

import logging
from typing import Mapping, Optional, Union

from lxml import etree

from primo_client.domain.ports import (
    InvalidParameterError,
    InvalidVariantError,
    MissingParameterError,
)
from primo_client.domain.request_variants import (
    ElementSetRegistry,
    RequestVariant,
    create_default_registry,
)

logger = logging.getLogger(__name__)

WS_REQUEST_NS = "http://www.exlibris.com/primo/xsd/wsRequest"


def lower_camel(name: str) -> str:
    """Convert 'user_id' or 'GetTags' to 'userId' / 'getTags'."""
    if "_" in name:
        head, *rest = name.split("_")
        return head.lower() + "".join(part.capitalize() for part in rest)
    return name[:1].lower() + name[1:]


class RequestBuilder:
    """Builds request payloads for registered request variants.

    Example Usage:
        ```python
        builder = RequestBuilder()
        payload = builder.build("GetTags", {"user_id": "N123", "doc_id": "dedupmrg1"})
        ```
    """

    def __init__(self, registry: Optional[ElementSetRegistry] = None):
        """Initialize builder.

        Parameters:
            registry: Variant registry (defaults to the Primo tag operations)
        """
        self.registry = registry or create_default_registry()

    def build(
        self,
        variant: Union[str, RequestVariant],
        values: Mapping[str, Optional[str]],
    ) -> str:
        """Serialize `values` for `variant` into a request payload.

        Parameters:
            variant: Variant name or resolved variant
            values: Mapping from element name to value

        Returns:
            str: The XML request document

        Raises:
            ConfigurationError: If the variant name is unknown
            InvalidVariantError: If the variant is abstract
            MissingParameterError: If a required element has no value
            InvalidParameterError: If a value contains characters XML cannot carry
        """
        if isinstance(variant, str):
            variant = self.registry.get(variant)
        else:
            self.registry.freeze()

        if variant.abstract:
            raise InvalidVariantError(
                f"Request variant '{variant.name}' is abstract and cannot be built",
                variant=variant.name,
            )

        root = etree.Element(
            f"{{{WS_REQUEST_NS}}}{lower_camel(variant.name)}Request",
            nsmap={None: WS_REQUEST_NS},
        )
        for element in variant.elements:
            value = values.get(element)
            if value is None:
                if variant.is_required(element):
                    raise MissingParameterError(element, variant=variant.name)
                continue
            child = etree.SubElement(root, f"{{{WS_REQUEST_NS}}}{lower_camel(element)}")
            try:
                child.text = str(value)
            except ValueError as e:
                raise InvalidParameterError(element, str(e), variant=variant.name) from e

        ignored = sorted(set(values) - set(variant.elements))
        if ignored:
            logger.debug(f"Ignoring parameters not accepted by {variant.name}: {ignored}")

        return etree.tostring(root, encoding="unicode")
