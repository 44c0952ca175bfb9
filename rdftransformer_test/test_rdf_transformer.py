"""
End-to-end tests for the RDFTransformer stage lifecycle using the
in-memory repository.
"""

from unittest.mock import patch

import pytest
import requests
from lxml import etree
from rdflib import Graph, URIRef
from rdflib.compare import isomorphic

from rdftransformer.config.config_loader import TransformerConfig, ConfigurationError
from rdftransformer.model.action_model import Action
from rdftransformer.repository.memory_repository import MemoryRepository
from rdftransformer.repository.repository_errors import RepositoryError
from rdftransformer.transform.rdf_transformer import RDFTransformer

from conftest import (
    BOOK_RDF, OTHER_BOOK_RDF, CTX_A, CTX_B, CONSTRUCT_ALL, xml_document, query_document
)

SUCCESS = b"<response><success/></response>"


def run_stage(repository, parameters, document, config=None):
    with RDFTransformer(config or TransformerConfig.from_dict({}), repository=repository) as transformer:
        transformer.setup(dict({"repository": "books"}, **parameters))
        return transformer.transform(document)


@pytest.fixture
def repository():
    return MemoryRepository("books")


class TestRDFTransformer:

    def test_add_then_graph_query(self, repository):
        added = run_stage(repository, {"action": "add", "contexts": CTX_A}, xml_document(OTHER_BOOK_RDF))
        assert etree.tostring(added) == SUCCESS

        result = run_stage(repository, {"action": "graph-query"}, query_document(CONSTRUCT_ALL))

        expected = Graph().parse(data=OTHER_BOOK_RDF, format="xml")
        assert isomorphic(Graph().parse(data=etree.tostring(result), format="xml"), expected)

    def test_clear_named_context_keeps_other_contexts(self, repository):
        run_stage(repository, {"action": "add", "contexts": CTX_A}, xml_document(BOOK_RDF))
        run_stage(repository, {"action": "add", "contexts": CTX_B}, xml_document(OTHER_BOOK_RDF))

        cleared = run_stage(repository, {"action": "clear", "contexts": CTX_A}, xml_document("<ignored/>"))

        assert etree.tostring(cleared) == SUCCESS
        connection = repository.get_connection()
        assert connection.size(URIRef(CTX_A)) == 0
        assert connection.size(URIRef(CTX_B)) == 3

    def test_clear_without_contexts_empties_repository(self, repository):
        run_stage(repository, {"action": "add", "contexts": f"{CTX_A} null"}, xml_document(BOOK_RDF))
        run_stage(repository, {"action": "add", "contexts": CTX_B}, xml_document(OTHER_BOOK_RDF))

        cleared = run_stage(repository, {"action": "clear"}, xml_document("<ignored/>"))

        assert etree.tostring(cleared) == SUCCESS
        assert repository.get_connection().size() == 0

    def test_configured_clear_confirmation(self, repository):
        run_stage(repository, {"action": "add"}, xml_document(BOOK_RDF))
        config = TransformerConfig.from_dict({"transform": {"require_clear_confirmation": True}})

        response = run_stage(repository, {"action": "clear"}, xml_document("<ignored/>"), config=config)

        assert response.getroot().find("error") is not None
        assert repository.get_connection().size() == 1

    def test_invalid_action_answers_with_error(self, repository):
        response = run_stage(repository, {"action": "remove"}, xml_document(BOOK_RDF))

        assert etree.tostring(response) == (
            b"<response><error>Invalid action parameter supplied: remove</error></response>"
        )

    def test_malformed_query_answers_with_error(self, repository):
        response = run_stage(repository, {"action": "graph-query"}, query_document("CONSTRUCT {"))

        error = response.getroot().find("error")
        assert error is not None
        assert error.text

    def test_setup_resolves_action_and_contexts(self, repository):
        transformer = RDFTransformer(repository=repository)
        transformer.setup({"repository": "books", "action": "clear", "contexts": f"{CTX_A} null"})

        assert transformer.action is Action.CLEAR
        assert transformer.contexts.store_arguments() == (URIRef(CTX_A), None)
        transformer.recycle()
        assert transformer.connection is None

    def test_repeated_setup_releases_previous_connection(self, repository):
        transformer = RDFTransformer(repository=repository)
        transformer.setup({"repository": "books", "action": "add"})
        first = transformer.connection

        transformer.setup({"repository": "books", "action": "clear"})

        assert not first.is_open()
        assert transformer.connection is not first
        assert transformer.connection.is_open()
        assert transformer.action is Action.CLEAR
        transformer.recycle()

    def test_missing_action_fails_setup(self, repository):
        transformer = RDFTransformer(repository=repository)

        with pytest.raises(ConfigurationError):
            transformer.setup({"repository": "books"})

    def test_unreachable_server_fails_setup(self):
        transformer = RDFTransformer(TransformerConfig.from_dict({}))

        with patch("rdftransformer.repository.http_repository.requests.Session") as session_class:
            session_class.return_value.get.side_effect = requests.exceptions.ConnectionError("refused")
            with pytest.raises(RepositoryError):
                transformer.setup({"repository": "books", "action": "add"})

        assert transformer.connection is None

    def test_transform_before_setup(self):
        with pytest.raises(RepositoryError):
            RDFTransformer().transform(xml_document(BOOK_RDF))

    def test_mock_repository_selected_by_configuration(self):
        config = TransformerConfig.from_dict({"server": {"use_mock_repository": True}})

        with RDFTransformer(config) as transformer:
            transformer.setup({"repository": "scratch", "action": "add"})
            assert isinstance(transformer.repository, MemoryRepository)
            assert etree.tostring(transformer.transform(xml_document(BOOK_RDF))) == SUCCESS
