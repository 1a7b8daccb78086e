"""Domain Ports - Abstract Contracts and Error Hierarchy.

This module defines the Port interfaces (abstract contracts) that Adapters must
implement, together with the exceptions raised across the package.
Following Hexagonal Architecture, the Domain Core defines what it needs, not how
it's provided.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Transport adapters (SOAP, HTTP, fixtures) implement TransportPort
    - Domain Core is isolated from wire specifics
    - Fail-fast: every error propagates to the caller immediately
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Union


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class PrimoError(Exception):
    """Base exception for all Primo client errors."""
    pass


class ConfigurationError(PrimoError):
    """Raised when the request-variant configuration is used incorrectly.

    Covers unknown or duplicate variant names, declarations made after the
    registry has been frozen, and clients missing a collaborator they need.
    """
    pass


class InvalidVariantError(ConfigurationError):
    """Raised when a payload is requested for an abstract request variant.

    Attributes:
        variant: Name of the abstract variant
    """

    def __init__(self, message: str, variant: Optional[str] = None):
        super().__init__(message)
        self.variant = variant


class MissingSetupParameterError(PrimoError):
    """Raised when required construction parameters are missing.

    All missing parameters are collected in a single validation pass, so the
    caller sees every problem at once.

    Attributes:
        parameters: Names of the missing parameters, in declaration order
        owner: Name of the class being constructed (used in the message)
    """

    def __init__(self, parameters: Iterable[str], owner: Optional[str] = None):
        self.parameters = list(parameters)
        self.owner = owner
        prefix = f"Error in {owner}. " if owner else ""
        super().__init__(
            f"{prefix}Missing required setup parameter(s): {', '.join(self.parameters)}."
        )


class ConflictingSetupParameterError(PrimoError):
    """Raised when mutually exclusive construction parameters are both given.

    Attributes:
        parameters: Names of the conflicting parameters
    """

    def __init__(self, parameters: Iterable[str]):
        self.parameters = list(parameters)
        super().__init__(
            f"Exactly one of {' or '.join(self.parameters)} must be supplied, got both."
        )


class MissingRecordIdError(PrimoError):
    """Raised when a record fragment has no control/recordid element."""
    pass


class MissingParameterError(PrimoError):
    """Raised when a required request element has no supplied value.

    Attributes:
        element: Name of the element without a value
        variant: Name of the variant being built
    """

    def __init__(self, element: str, variant: Optional[str] = None):
        self.element = element
        self.variant = variant
        where = f" for request '{variant}'" if variant else ""
        super().__init__(f"Missing required request parameter '{element}'{where}.")


class InvalidParameterError(PrimoError):
    """Raised when a request element value cannot be written as XML text.

    Attributes:
        element: Name of the element with the unusable value
        variant: Name of the variant being built
    """

    def __init__(self, element: str, reason: str, variant: Optional[str] = None):
        self.element = element
        self.variant = variant
        where = f" for request '{variant}'" if variant else ""
        super().__init__(f"Invalid value for request parameter '{element}'{where}: {reason}")


class RecordNotFoundError(PrimoError):
    """Raised when a remote lookup returns no matching record fragment.

    Attributes:
        record_id: The identifier that was looked up
    """

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


class TransportError(PrimoError):
    """Raised when the transport collaborator fails.

    Transport adapters should raise this directly. Any other exception coming
    out of a transport is re-raised as TransportError with the original
    exception chained as ``__cause__``.
    """
    pass


class MalformedXMLError(PrimoError):
    """Raised when an XML fragment or envelope cannot be parsed."""
    pass


class XMLSecurityError(PrimoError):
    """Raised when parsed XML violates a security limit (e.g. nesting depth)."""
    pass


# ============================================================================
# Ports
# ============================================================================

# What a transport may hand back: raw XML text/bytes or an already parsed element
Envelope = Union[str, bytes, Any]


class TransportPort(ABC):
    """Abstract contract for the transport collaborator.

    The core never performs network I/O itself. A transport adapter executes
    the "get record by id" operation against the discovery service and returns
    the response envelope untouched. Timeouts, retries and authentication
    belong to the adapter.

    Example Usage:
        ```python
        class SoapTransport(TransportPort):
            def get_record_by_id(self, record_id, base_url, options):
                return session.post(...).content

        client = PrimoClient(transport=SoapTransport())
        record = client.record(base_url="http://primo.example", record_id="dedupmrg123")
        ```
    """

    @abstractmethod
    def get_record_by_id(self, record_id: str, base_url: str, options: dict) -> Envelope:
        """Fetch a single record wrapped in the service's search-result envelope.

        Parameters:
            record_id: Primo document identifier
            base_url: Base URL of the Primo installation
            options: Extra request options; always contains 'institution' and 'vid'

        Returns:
            Envelope: The raw response (str, bytes or parsed lxml element)

        Raises:
            TransportError: If the call cannot be completed
        """
        pass
