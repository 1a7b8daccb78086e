"""Request Variant Definitions and Element-Set Registry.

Every Primo web-service operation accepts a fixed, ordered list of request
elements. Related operations share a base list and differ by a few elements:
GetAllMyTags drops the document id, RemoveTag adds the tag value, and so on.

This module keeps those definitions as explicit configuration values. A
variant is declared once against a parent, its final element set is resolved
at registration time, and the result is stored in a frozen model. Nothing is
carried through class inheritance, so a variant's deltas can never leak into
its parent or siblings.

Resolution rules:
    - Start from the parent's resolved elements (or the root's base elements)
    - Apply additions first, then removals
    - Adding an element already present keeps its original position
    - Removing an element that is not present is a no-op
"""

import logging
import threading
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from primo_client.domain.ports import ConfigurationError

logger = logging.getLogger(__name__)


class RequestVariant(BaseModel):
    """One concrete or abstract request-operation definition.

    Parameters:
        name: Operation name (e.g. 'GetTags')
        abstract: Abstract variants only hold a shared element set
        parent: Name of the variant this one derives from (None for roots)
        base_elements: Elements declared on a family root
        additions: Elements this variant adds to its parent's set
        removals: Elements this variant removes from its parent's set
        optional_elements: Elements that may be left without a value
        elements: Final resolved element set, in wire order
    """

    name: str = Field(..., min_length=1, description="Operation name")
    abstract: bool = Field(False, description="Abstract variants cannot be built")
    parent: Optional[str] = Field(None, description="Parent variant name")
    base_elements: tuple[str, ...] = Field(default_factory=tuple)
    additions: tuple[str, ...] = Field(default_factory=tuple)
    removals: tuple[str, ...] = Field(default_factory=tuple)
    optional_elements: frozenset[str] = Field(default_factory=frozenset)
    elements: tuple[str, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    def is_required(self, element: str) -> bool:
        """Whether a value must be supplied for `element`."""
        return element not in self.optional_elements


def apply_deltas(
    base: Iterable[str],
    additions: Iterable[str] = (),
    removals: Iterable[str] = (),
) -> tuple[str, ...]:
    """Resolve an element set from a base and add/remove deltas.

    Parameters:
        base: Ordered base elements
        additions: Elements appended (in order) when not already present
        removals: Elements dropped; unknown names are ignored

    Returns:
        tuple[str, ...]: The resolved, ordered element set
    """
    resolved = list(dict.fromkeys(base))
    for element in additions:
        if element not in resolved:
            resolved.append(element)
    dropped = set(removals)
    return tuple(element for element in resolved if element not in dropped)


class ElementSetRegistry:
    """Registry mapping variant names to resolved, immutable variants.

    Declarations are only accepted until the registry is frozen. The
    RequestBuilder freezes the registry on first lookup, after which the
    stored variants are read-only and safe to share between threads.

    Example Usage:
        ```python
        registry = ElementSetRegistry()
        registry.define_base("Tags", ["user_id", "doc_id"])
        registry.remove_elements("GetAllMyTags", "Tags", ["doc_id"])
        registry.resolve("GetAllMyTags")  # ('user_id',)
        ```
    """

    def __init__(self):
        self._variants: dict[str, RequestVariant] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        """True once no further declarations are accepted."""
        return self._frozen

    def freeze(self) -> None:
        """Reject any further declarations."""
        with self._lock:
            if not self._frozen:
                logger.debug(f"Freezing element-set registry with {len(self._variants)} variants")
            self._frozen = True

    def define_base(
        self,
        name: str,
        elements: Iterable[str],
        abstract: bool = True,
        optional: Iterable[str] = (),
    ) -> RequestVariant:
        """Declare a family root holding the shared base element set."""
        base = tuple(elements)
        return self._register(
            RequestVariant(
                name=name,
                abstract=abstract,
                base_elements=base,
                optional_elements=frozenset(optional),
                elements=apply_deltas(base),
            )
        )

    def define_variant(
        self,
        name: str,
        parent: str,
        additions: Iterable[str] = (),
        removals: Iterable[str] = (),
        abstract: bool = False,
        optional: Iterable[str] = (),
    ) -> RequestVariant:
        """Declare a variant deriving from an already registered parent.

        Parameters:
            name: New variant name
            parent: Name of a registered variant
            additions: Elements added to the parent's resolved set
            removals: Elements removed after additions are applied
            abstract: Whether the new variant is itself a family root
            optional: Elements that may be omitted, on top of the parent's

        Returns:
            RequestVariant: The registered, resolved variant

        Raises:
            ConfigurationError: If the parent is unknown, the name is taken,
                or the registry is frozen
        """
        parent_variant = self.get(parent, freeze=False)
        additions = tuple(additions)
        removals = tuple(removals)
        return self._register(
            RequestVariant(
                name=name,
                abstract=abstract,
                parent=parent,
                additions=additions,
                removals=removals,
                optional_elements=parent_variant.optional_elements | frozenset(optional),
                elements=apply_deltas(parent_variant.elements, additions, removals),
            )
        )

    def add_elements(self, name: str, parent: str, elements: Iterable[str]) -> RequestVariant:
        """Declare a concrete variant that adds `elements` to its parent's set."""
        return self.define_variant(name, parent, additions=elements)

    def remove_elements(self, name: str, parent: str, elements: Iterable[str]) -> RequestVariant:
        """Declare a concrete variant that removes `elements` from its parent's set."""
        return self.define_variant(name, parent, removals=elements)

    def get(self, name: str, freeze: bool = True) -> RequestVariant:
        """Look up a registered variant.

        Parameters:
            name: Variant name
            freeze: Freeze the registry before returning (used by builders)

        Raises:
            ConfigurationError: If the variant is not registered
        """
        if freeze:
            self.freeze()
        try:
            return self._variants[name]
        except KeyError:
            raise ConfigurationError(f"Unknown request variant: {name}") from None

    def resolve(self, name: str) -> tuple[str, ...]:
        """Return the final ordered element set of a variant."""
        return self.get(name, freeze=False).elements

    def names(self) -> list[str]:
        """Names of all registered variants, in registration order."""
        return list(self._variants)

    def __contains__(self, name: object) -> bool:
        return name in self._variants

    def _register(self, variant: RequestVariant) -> RequestVariant:
        with self._lock:
            if self._frozen:
                raise ConfigurationError(
                    f"Cannot declare variant '{variant.name}': registry is frozen"
                )
            if variant.name in self._variants:
                raise ConfigurationError(f"Request variant already defined: {variant.name}")
            self._variants[variant.name] = variant
        logger.debug(f"Registered request variant {variant.name}: {variant.elements}")
        return variant


def create_default_registry() -> ElementSetRegistry:
    """Build a registry holding the Primo tag operations.

    UserRecord is the abstract family root for operations addressed by user
    and document; Tags narrows it to the tagging service.
    """
    registry = ElementSetRegistry()
    registry.define_base("UserRecord", ["user_id", "doc_id"])
    registry.define_variant("Tags", "UserRecord", abstract=True)
    registry.define_variant("GetTags", "Tags")
    registry.remove_elements("GetAllMyTags", "Tags", ["doc_id"])
    registry.remove_elements("GetTagsForRecord", "Tags", ["user_id"])
    registry.add_elements("RemoveTag", "Tags", ["value"])
    registry.remove_elements("GetUserTags", "Tags", ["doc_id"])
    return registry
