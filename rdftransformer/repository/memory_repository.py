"""Memory Repository

In-process repository backed by a pyoxigraph store. Behaves like a remote
RDF4J repository: the null context is the store's default graph and graph
queries run over the union of all graphs.
"""

import logging
from typing import Optional, Union

import pyoxigraph as px
from rdflib import URIRef, BNode, Literal
from rdflib.namespace import XSD
from rdflib.term import Identifier, Node

from .repository_inf import (
    RepositoryInterface, RepositoryConnectionInterface, GraphQueryInterface,
    RDFHandler, RDFFormat, QueryLanguage
)
from .repository_errors import (
    RepositoryError, RDFParseError, MalformedQueryError, QueryEvaluationError,
    UnsupportedQueryLanguageError, UnsupportedRDFFormatError
)

logger = logging.getLogger(__name__)

_FORMAT_MAP = {
    RDFFormat.RDF_XML: px.RdfFormat.RDF_XML,
    RDFFormat.N_TRIPLES: px.RdfFormat.N_TRIPLES,
    RDFFormat.TURTLE: px.RdfFormat.TURTLE,
}


def to_graph_name(context: Optional[Identifier]) -> Union[px.NamedNode, px.BlankNode, px.DefaultGraph]:
    """
    Convert a context argument into a pyoxigraph graph name.

    Args:
        context: URI resource, blank node, or None for the null context

    Returns:
        pyoxigraph graph name

    Raises:
        RepositoryError: If the context is not a valid IRI
    """
    if context is None:
        return px.DefaultGraph()
    if isinstance(context, BNode):
        return px.BlankNode(str(context))
    try:
        return px.NamedNode(str(context))
    except ValueError as e:
        raise RepositoryError(f"Not a valid (absolute) URI: {context}") from e


def to_rdflib_term(term) -> Node:
    """Convert a pyoxigraph term into the equivalent rdflib term."""
    if isinstance(term, px.NamedNode):
        return URIRef(term.value)
    if isinstance(term, px.BlankNode):
        return BNode(term.value)
    if isinstance(term, px.Literal):
        if term.language:
            return Literal(term.value, lang=term.language)
        if term.datatype.value == str(XSD.string):
            return Literal(term.value)
        return Literal(term.value, datatype=URIRef(term.datatype.value))
    raise QueryEvaluationError(f"Unsupported term in query result: {term!r}")


class MemoryGraphQuery(GraphQueryInterface):
    """Graph query evaluated against the in-memory store."""

    def __init__(self, store: px.Store, query: str, base_uri: Optional[str] = None):
        self.store = store
        self.query = query
        self.base_uri = base_uri

    def evaluate(self, handler: RDFHandler) -> None:
        try:
            results = self.store.query(
                self.query,
                base_iri=self.base_uri,
                use_default_graph_as_union=True,
            )
        except SyntaxError as e:
            raise MalformedQueryError(str(e)) from e
        except (OSError, ValueError) as e:
            raise QueryEvaluationError(str(e)) from e

        if not isinstance(results, px.QueryTriples):
            raise QueryEvaluationError("Query does not produce a graph result")

        handler.start_rdf()
        for triple in results:
            handler.handle_statement(
                to_rdflib_term(triple.subject),
                to_rdflib_term(triple.predicate),
                to_rdflib_term(triple.object),
            )
        handler.end_rdf()


class MemoryRepositoryConnection(RepositoryConnectionInterface):
    """Connection onto a MemoryRepository's store."""

    def __init__(self, repository: "MemoryRepository"):
        self.repository = repository
        self._open = True

    def _get_store(self) -> px.Store:
        if not self._open:
            raise RepositoryError("Connection has been closed")
        return self.repository.store

    def add(self, data: bytes, base_uri: Optional[str], data_format: RDFFormat,
            *contexts: Optional[Identifier]) -> None:
        store = self._get_store()
        px_format = _FORMAT_MAP.get(data_format)
        if px_format is None:
            raise UnsupportedRDFFormatError(f"Unsupported RDF format: {data_format}")

        targets = [to_graph_name(context) for context in contexts] or [px.DefaultGraph()]

        # Parsed once so blank nodes are shared by every target graph
        try:
            quads = list(px.parse(input=data, format=px_format, base_iri=base_uri, rename_blank_nodes=True))
        except SyntaxError as e:
            raise RDFParseError(str(e)) from e
        except (OSError, ValueError) as e:
            raise RepositoryError(str(e)) from e

        store.extend(
            px.Quad(quad.subject, quad.predicate, quad.object, target)
            for target in targets
            for quad in quads
        )

    def clear(self, *contexts: Optional[Identifier]) -> None:
        store = self._get_store()
        if not contexts:
            store.clear()
            return
        for context in contexts:
            store.clear_graph(to_graph_name(context))

    def prepare_graph_query(self, language: QueryLanguage, query: str,
                            base_uri: Optional[str] = None) -> MemoryGraphQuery:
        if language is not QueryLanguage.SPARQL:
            raise UnsupportedQueryLanguageError(f"Unsupported query language: {language}")
        return MemoryGraphQuery(self._get_store(), query, base_uri)

    def size(self, *contexts: Optional[Identifier]) -> int:
        store = self._get_store()
        if not contexts:
            return len(store)
        return sum(
            len(list(store.quads_for_pattern(None, None, None, to_graph_name(context))))
            for context in contexts
        )

    def close(self) -> None:
        self._open = False

    def is_open(self) -> bool:
        return self._open


class MemoryRepository(RepositoryInterface):
    """
    Repository held entirely in memory.

    Selected with ``server.use_mock_repository: true``. Data does not
    outlive the process.
    """

    def __init__(self, repository_id: str = "memory"):
        self.repository_id = repository_id
        self.store: Optional[px.Store] = None

    def initialize(self) -> None:
        if self.store is None:
            self.store = px.Store()
            logger.info(f"Initialized in-memory repository '{self.repository_id}'")

    def get_connection(self) -> MemoryRepositoryConnection:
        if self.store is None:
            raise RepositoryError("Repository has not been initialized")
        return MemoryRepositoryConnection(self)

    def shut_down(self) -> None:
        logger.info(f"Shut down in-memory repository '{self.repository_id}'")

    def __str__(self) -> str:
        return f"MemoryRepository(id={self.repository_id})"
