"""Unit tests for layered resolution contexts."""

import pytest

from rentdocs.contexts.templating.resolution_context import ContextLayer, ResolutionContext


@pytest.fixture
def context():
    return ResolutionContext.from_layers(
        [
            ("contact", {"tenantName": "Ada", "phone": "(555) 111-2222"}),
            ("office", {"phone": "(555) 999-0000", "officeName": "Harbor"}),
        ]
    )


@pytest.mark.unit
def test_lookup_uses_topmost_layer(context):
    assert context.lookup("phone") == "(555) 999-0000"
    assert context.source_of("phone") == "office"
    assert context.lookup("tenantName") == "Ada"
    assert context.lookup("missing") is None


@pytest.mark.unit
def test_merged_matches_lookup(context):
    merged = context.merged()

    assert merged["phone"] == context.lookup("phone")
    assert set(merged) == {"tenantName", "phone", "officeName"}


@pytest.mark.unit
def test_with_layer_returns_new_context(context):
    extended = context.with_layer("email", {"phone": "n/a"})

    assert extended.lookup("phone") == "n/a"
    assert context.lookup("phone") == "(555) 999-0000"
    assert extended.layer_names == ["contact", "office", "email"]


@pytest.mark.unit
def test_reordered_requires_permutation(context):
    with pytest.raises(ValueError):
        context.reordered(["contact"])


@pytest.mark.unit
def test_layer_values_are_read_only():
    source = {"a": "1"}
    layer = ContextLayer("values", source)
    source["a"] = "2"

    assert layer.values["a"] == "1"
    with pytest.raises(TypeError):
        layer.values["a"] = "3"


@pytest.mark.unit
def test_layer_values_must_be_strings():
    with pytest.raises(ValueError, match="must be a string"):
        ContextLayer("values", {"amount": 12.5})


@pytest.mark.unit
def test_contains_and_get_layer(context):
    assert "officeName" in context
    assert "nope" not in context
    assert context.get_layer("contact").defines("tenantName")
    assert context.get_layer("missing") is None
