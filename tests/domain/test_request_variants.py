"""Tests for request variant definitions and element-set resolution."""

import threading

import pytest
from pydantic import ValidationError

from primo_client.domain.ports import ConfigurationError
from primo_client.domain.request_variants import (
    ElementSetRegistry,
    apply_deltas,
    create_default_registry,
)


class TestApplyDeltas:
    """Test suite for element-set resolution."""

    def test_additions_are_appended_in_order(self):
        """New elements go to the end, in declared order."""
        assert apply_deltas(["a", "b"], additions=["c", "d"]) == ("a", "b", "c", "d")

    def test_adding_present_element_keeps_position(self):
        """Re-adding an element does not duplicate or move it."""
        assert apply_deltas(["a", "b"], additions=["a"]) == ("a", "b")

    def test_removing_absent_element_is_noop(self):
        """Removing an unknown element is silently ignored."""
        assert apply_deltas(["a", "b"], removals=["z"]) == ("a", "b")

    def test_additions_applied_before_removals(self):
        """An element both added and removed ends up absent."""
        assert apply_deltas(["a"], additions=["b"], removals=["b"]) == ("a",)

    def test_duplicate_base_elements_collapse(self):
        """The base set is treated as an ordered set."""
        assert apply_deltas(["a", "b", "a"]) == ("a", "b")


class TestElementSetRegistry:
    """Test suite for ElementSetRegistry."""

    @pytest.fixture
    def registry(self):
        registry = ElementSetRegistry()
        registry.define_base("Root", ["user_id", "doc_id"])
        return registry

    def test_sibling_removals_do_not_interfere(self, registry):
        """Each subtype sees only its own deltas; the root stays intact."""
        registry.remove_elements("NoDoc", "Root", ["doc_id"])
        registry.remove_elements("NoUser", "Root", ["user_id"])

        assert registry.resolve("NoDoc") == ("user_id",)
        assert registry.resolve("NoUser") == ("doc_id",)
        assert registry.resolve("Root") == ("user_id", "doc_id")
        assert registry.get("Root", freeze=False).base_elements == ("user_id", "doc_id")

    def test_grandchild_builds_on_parent_resolution(self, registry):
        """Deltas stack along the declared parent chain."""
        registry.define_variant("Middle", "Root", additions=["value"], abstract=True)
        registry.remove_elements("Leaf", "Middle", ["doc_id"])

        assert registry.resolve("Leaf") == ("user_id", "value")
        assert registry.resolve("Middle") == ("user_id", "doc_id", "value")

    def test_resolve_is_deterministic(self, registry):
        """Same variant resolves to the same tuple every time."""
        registry.add_elements("WithValue", "Root", ["value"])
        assert registry.resolve("WithValue") == registry.resolve("WithValue")

    def test_root_is_abstract_by_default(self, registry):
        """Family roots only hold the base set."""
        assert registry.get("Root", freeze=False).abstract is True

    def test_unknown_variant(self, registry):
        """Looking up an unregistered name raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unknown request variant"):
            registry.resolve("Nope")

    def test_unknown_parent(self, registry):
        """Deriving from an unregistered parent raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            registry.add_elements("Child", "Missing", ["x"])

    def test_duplicate_definition(self, registry):
        """A variant name can only be defined once."""
        with pytest.raises(ConfigurationError, match="already defined"):
            registry.define_base("Root", ["x"])

    def test_frozen_registry_rejects_declarations(self, registry):
        """No declarations are accepted once the registry is frozen."""
        registry.get("Root")
        assert registry.frozen is True

        with pytest.raises(ConfigurationError, match="frozen"):
            registry.remove_elements("Late", "Root", ["doc_id"])
        assert "Late" not in registry

    def test_variants_are_immutable(self, registry):
        """Resolved variants cannot be mutated after registration."""
        variant = registry.get("Root", freeze=False)
        with pytest.raises(ValidationError):
            variant.elements = ("hacked",)

    def test_optional_elements_are_inherited(self):
        """Optional markers carry over to derived variants."""
        registry = ElementSetRegistry()
        registry.define_base("Search", ["query", "start"], optional=["start"])
        child = registry.add_elements("SearchMore", "Search", ["limit"])

        assert child.is_required("query") is True
        assert child.is_required("start") is False

    def test_concurrent_lookups_after_freeze(self):
        """Frozen variants can be read from many threads."""
        registry = create_default_registry()
        registry.freeze()
        results = []

        def worker():
            results.append(registry.resolve("RemoveTag"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [("user_id", "doc_id", "value")] * 8


class TestDefaultRegistry:
    """Test suite for the shipped Primo tag operations."""

    @pytest.fixture
    def registry(self):
        return create_default_registry()

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("GetTags", ("user_id", "doc_id")),
            ("GetAllMyTags", ("user_id",)),
            ("GetTagsForRecord", ("doc_id",)),
            ("RemoveTag", ("user_id", "doc_id", "value")),
            ("GetUserTags", ("user_id",)),
        ],
    )
    def test_tag_operations(self, registry, name, expected):
        """Each tag operation resolves to its documented element set."""
        assert registry.resolve(name) == expected
        assert registry.get(name, freeze=False).abstract is False

    def test_family_roots_are_abstract(self, registry):
        """UserRecord and Tags cannot be built directly."""
        assert registry.get("UserRecord", freeze=False).abstract is True
        assert registry.get("Tags", freeze=False).abstract is True
        assert registry.resolve("Tags") == ("user_id", "doc_id")

    def test_registries_are_independent(self, registry):
        """Two default registries share no state."""
        other = create_default_registry()
        other.add_elements("Extra", "Tags", ["note"])

        assert "Extra" not in registry
        assert registry.names() == [
            "UserRecord", "Tags", "GetTags", "GetAllMyTags",
            "GetTagsForRecord", "RemoveTag", "GetUserTags",
        ]
