"""Unit tests for RequestBuilder."""

import pytest
from lxml import etree

from primo_client.adapters.request_builder import WS_REQUEST_NS, RequestBuilder, lower_camel
from primo_client.domain.ports import (
    ConfigurationError,
    InvalidParameterError,
    InvalidVariantError,
    MissingParameterError,
)
from primo_client.domain.request_variants import ElementSetRegistry


@pytest.fixture
def builder():
    return RequestBuilder()


class TestBuild:
    """Test payload serialization."""

    def test_get_tags_payload(self, builder):
        """Elements are written in declared order inside the wsRequest namespace."""
        payload = builder.build("GetTags", {"doc_id": "dedupmrg1", "user_id": "N123"})
        assert payload == (
            '<getTagsRequest xmlns="http://www.exlibris.com/primo/xsd/wsRequest">'
            "<userId>N123</userId><docId>dedupmrg1</docId>"
            "</getTagsRequest>"
        )

    def test_removed_element_not_serialized(self, builder):
        """GetAllMyTags only carries the user id."""
        payload = builder.build("GetAllMyTags", {"user_id": "N123", "doc_id": "ignored"})
        root = etree.fromstring(payload)

        assert etree.QName(root).localname == "getAllMyTagsRequest"
        assert [etree.QName(child).localname for child in root] == ["userId"]

    def test_added_element_serialized_last(self, builder):
        """RemoveTag appends the tag value after the base elements."""
        payload = builder.build("RemoveTag", {"user_id": "N1", "doc_id": "D1", "value": "fiction"})
        root = etree.fromstring(payload)

        assert [etree.QName(child).localname for child in root] == ["userId", "docId", "value"]
        assert root.find(f"{{{WS_REQUEST_NS}}}value").text == "fiction"

    def test_values_are_escaped(self, builder):
        """Values are XML-escaped, not spliced in raw."""
        payload = builder.build("GetTagsForRecord", {"doc_id": "a<b&c"})
        assert "<docId>a&lt;b&amp;c</docId>" in payload

    def test_build_is_side_effect_free(self, builder):
        """Repeated builds of the same input are identical."""
        values = {"user_id": "N1", "doc_id": "D1"}
        assert builder.build("GetTags", values) == builder.build("GetTags", values)


class TestValidation:
    """Test builder failures."""

    @pytest.mark.parametrize("name", ["UserRecord", "Tags"])
    def test_abstract_variant(self, builder, name):
        """Abstract variants always fail with InvalidVariantError."""
        with pytest.raises(InvalidVariantError) as exc_info:
            builder.build(name, {"user_id": "N1", "doc_id": "D1"})
        assert exc_info.value.variant == name
        assert isinstance(exc_info.value, ConfigurationError)

    def test_missing_required_element(self, builder):
        """The error names the element without a value."""
        with pytest.raises(MissingParameterError) as exc_info:
            builder.build("GetTags", {"user_id": "N1"})
        assert exc_info.value.element == "doc_id"
        assert "doc_id" in str(exc_info.value)

    def test_none_value_counts_as_missing(self, builder):
        """An explicit None is not a value."""
        with pytest.raises(MissingParameterError):
            builder.build("RemoveTag", {"user_id": "N1", "doc_id": "D1", "value": None})

    def test_unknown_variant(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build("AddTag", {})

    def test_optional_element_may_be_omitted(self):
        """Optional elements are skipped when no value is supplied."""
        registry = ElementSetRegistry()
        registry.define_base("Search", ["query", "start"], abstract=False, optional=["start"])
        payload = RequestBuilder(registry).build("Search", {"query": "greene"})

        assert payload.endswith("<query>greene</query></searchRequest>")

    def test_build_freezes_registry(self):
        """Once a request is built, the registry accepts no more declarations."""
        registry = ElementSetRegistry()
        registry.define_base("Root", ["user_id"])
        registry.define_variant("Leaf", "Root")
        RequestBuilder(registry).build("Leaf", {"user_id": "N1"})

        with pytest.raises(ConfigurationError, match="frozen"):
            registry.add_elements("Late", "Root", ["doc_id"])

    def test_build_from_variant_object_freezes_registry(self):
        """Building from a resolved variant also closes the registry."""
        registry = ElementSetRegistry()
        registry.define_base("Root", ["user_id"])
        registry.define_variant("Leaf", "Root")
        variant = registry.get("Leaf", freeze=False)
        assert not registry.frozen

        RequestBuilder(registry).build(variant, {"user_id": "N1"})

        assert registry.frozen
        with pytest.raises(ConfigurationError, match="frozen"):
            registry.define_variant("Late", "Root")

    def test_control_character_value(self, builder):
        """Values XML cannot represent raise a package error naming the element."""
        with pytest.raises(InvalidParameterError, match="user_id") as exc_info:
            builder.build("GetUserTags", {"user_id": "N1\x00"})
        assert exc_info.value.element == "user_id"
        assert exc_info.value.variant == "GetUserTags"


class TestLowerCamel:
    """Test element name conversion."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("user_id", "userId"),
            ("doc_id", "docId"),
            ("value", "value"),
            ("GetAllMyTags", "getAllMyTags"),
        ],
    )
    def test_lower_camel(self, name, expected):
        assert lower_camel(name) == expected
