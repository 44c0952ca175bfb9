"""
Shared fixtures for the RDF transformer test suite.
"""

from typing import Any, List, Optional, Tuple

import pytest
from lxml import etree
from rdflib import URIRef, Literal

from rdftransformer.repository.memory_repository import MemoryRepository
from rdftransformer.repository.repository_errors import RepositoryError
from rdftransformer.repository.repository_inf import (
    RepositoryConnectionInterface, GraphQueryInterface, RDFHandler, RDFFormat, QueryLanguage
)

EX = "http://example.org/ns#"
BOOK_1 = "http://example.org/book/1"
BOOK_2 = "http://example.org/book/2"
CTX_A = "http://example.org/graph/a"
CTX_B = "http://example.org/graph/b"

BOOK_RDF = f"""<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns:ex="{EX}">
  <rdf:Description rdf:about="{BOOK_1}">
    <ex:title>RDF Primer</ex:title>
  </rdf:Description>
</rdf:RDF>
"""

OTHER_BOOK_RDF = f"""<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns:ex="{EX}">
  <rdf:Description rdf:about="{BOOK_2}">
    <ex:title xml:lang="en">SPARQL by Example</ex:title>
    <ex:pages rdf:datatype="http://www.w3.org/2001/XMLSchema#integer">120</ex:pages>
    <ex:author rdf:resource="http://example.org/person/ada"/>
  </rdf:Description>
</rdf:RDF>
"""

CONSTRUCT_ALL = "CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o }"


def xml_document(text: str) -> etree._ElementTree:
    return etree.ElementTree(etree.fromstring(text.encode("utf-8")))


def query_document(query: str) -> etree._ElementTree:
    root = etree.Element("query")
    root.text = query
    return etree.ElementTree(root)


class StubGraphQuery(GraphQueryInterface):
    def __init__(self, statements):
        self.statements = statements

    def evaluate(self, handler: RDFHandler) -> None:
        handler.start_rdf()
        handler.handle_namespace("ex", EX)
        for statement in self.statements:
            handler.handle_statement(*statement)
        handler.end_rdf()


class RecordingConnection(RepositoryConnectionInterface):
    """Connection stub that records every call it receives."""

    def __init__(self, statements: Optional[List[Tuple[Any, Any, Any]]] = None):
        self.calls: List[Tuple] = []
        self.statements = statements or []
        self.closed = False

    def add(self, data: bytes, base_uri: Optional[str], data_format: RDFFormat, *contexts) -> None:
        self.calls.append(("add", data, base_uri, data_format, contexts))

    def clear(self, *contexts) -> None:
        self.calls.append(("clear", contexts))

    def prepare_graph_query(self, language: QueryLanguage, query: str, base_uri: Optional[str] = None):
        self.calls.append(("prepare_graph_query", language, query, base_uri))
        return StubGraphQuery(self.statements)

    def size(self, *contexts) -> int:
        self.calls.append(("size", contexts))
        return len(self.statements)

    def close(self) -> None:
        self.closed = True

    def is_open(self) -> bool:
        return not self.closed


class FailingConnection(RecordingConnection):
    """Connection stub whose every store operation fails."""

    def add(self, data, base_uri, data_format, *contexts) -> None:
        super().add(data, base_uri, data_format, *contexts)
        raise RepositoryError("Connection refused by triple store")

    def clear(self, *contexts) -> None:
        super().clear(*contexts)
        raise RepositoryError("Connection refused by triple store")

    def prepare_graph_query(self, language, query, base_uri=None):
        super().prepare_graph_query(language, query, base_uri)
        raise RepositoryError("Connection refused by triple store")


@pytest.fixture
def recording_connection():
    return RecordingConnection(statements=[
        (URIRef(BOOK_1), URIRef(f"{EX}title"), Literal("RDF Primer")),
    ])


@pytest.fixture
def failing_connection():
    return FailingConnection()


@pytest.fixture
def memory_repository():
    repository = MemoryRepository("test")
    repository.initialize()
    yield repository
    repository.shut_down()


@pytest.fixture
def memory_connection(memory_repository):
    connection = memory_repository.get_connection()
    yield connection
    connection.close()
