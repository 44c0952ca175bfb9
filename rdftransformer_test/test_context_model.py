"""
Tests for context string resolution and action name resolution.
"""

import pytest
from rdflib import URIRef

from rdftransformer.model.action_model import Action
from rdftransformer.model.context_model import (
    ContextSet, ContextSetKind, NO_VALUE, resolve_contexts
)
from rdftransformer.repository.value_factory import ValueFactory

from conftest import CTX_A, CTX_B


@pytest.fixture
def factory():
    return ValueFactory()


class TestResolveContexts:

    def test_absent_spec_is_unspecified(self, factory):
        contexts = resolve_contexts(None, factory)

        assert contexts.is_unspecified
        assert contexts.kind is ContextSetKind.UNSPECIFIED
        assert contexts.store_arguments() == ()

    def test_empty_spec_is_unspecified(self, factory):
        assert resolve_contexts("", factory).is_unspecified

    def test_tokens_keep_order_and_duplicates(self, factory):
        contexts = resolve_contexts(f"{CTX_B} {CTX_A} {CTX_B}", factory)

        assert contexts.kind is ContextSetKind.EXPLICIT
        assert list(contexts) == [URIRef(CTX_B), URIRef(CTX_A), URIRef(CTX_B)]
        assert len(contexts) == 3

    def test_null_token_is_no_value(self, factory):
        contexts = resolve_contexts("null", factory)

        assert not contexts.is_unspecified
        assert contexts.entries == (NO_VALUE,)
        assert contexts.store_arguments() == (None,)

    def test_null_differs_from_unspecified(self, factory):
        assert resolve_contexts("null", factory) != resolve_contexts(None, factory)

    def test_mixed_uri_and_null(self, factory):
        contexts = resolve_contexts(f"{CTX_A} null", factory)

        assert contexts.store_arguments() == (URIRef(CTX_A), None)

    def test_splits_on_single_spaces(self, factory):
        contexts = resolve_contexts(f"{CTX_A}  {CTX_B}", factory)

        assert len(contexts) == 3

    def test_invalid_uri_is_not_rejected(self, factory):
        contexts = resolve_contexts("not-a-uri", factory)

        assert contexts.entries == (URIRef("not-a-uri"),)

    def test_empty_context_set_is_explicit(self):
        contexts = ContextSet.empty()

        assert not contexts.is_unspecified
        assert len(contexts) == 0


class TestActionFromName:

    @pytest.mark.parametrize("name,expected", [
        ("add", Action.ADD),
        ("clear", Action.CLEAR),
        ("graph-query", Action.GRAPH_QUERY),
    ])
    def test_known_actions(self, name, expected):
        assert Action.from_name(name) is expected

    @pytest.mark.parametrize("name", ["Add", "graph_query", "", "delete", None])
    def test_unknown_actions(self, name):
        assert Action.from_name(name) is Action.UNRECOGNIZED
