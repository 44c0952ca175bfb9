"""RDF Transformer Repository Interface

Abstract base classes defining the contract between the transformer and a
triple store. Implemented by the HTTP repository (RDF4J REST protocol) and
the in-memory repository used for tests and local runs.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from rdflib.term import Identifier, Node

from .value_factory import ValueFactory


class RDFFormat(Enum):
    """RDF serialization formats accepted by repository connections."""
    RDF_XML = "application/rdf+xml"
    N_TRIPLES = "application/n-triples"
    TURTLE = "text/turtle"

    @property
    def mime_type(self) -> str:
        return self.value


class QueryLanguage(Enum):
    """Query languages accepted by repository connections."""
    SPARQL = "sparql"


class RDFHandler(ABC):
    """
    Receiver for a stream of RDF statements.

    A graph query pushes its result into a handler: ``start_rdf`` once,
    any number of ``handle_namespace`` and ``handle_statement`` calls, then
    ``end_rdf`` once.
    """

    @abstractmethod
    def start_rdf(self) -> None:
        pass

    @abstractmethod
    def handle_namespace(self, prefix: str, uri: str) -> None:
        pass

    @abstractmethod
    def handle_statement(self, subject: Identifier, predicate: Identifier, obj: Node) -> None:
        pass

    @abstractmethod
    def end_rdf(self) -> None:
        pass


class GraphQueryInterface(ABC):
    """A prepared graph query bound to a connection."""

    @abstractmethod
    def evaluate(self, handler: RDFHandler) -> None:
        """
        Evaluate the query and report the resulting statements to the handler.

        Raises:
            MalformedQueryError: If the store rejects the query text
            QueryEvaluationError: If evaluation fails
        """
        pass


class RepositoryConnectionInterface(ABC):
    """
    Abstract interface for a session with one repository.

    Context arguments are rdflib resources, or ``None`` for the null
    (default) context. Passing no context arguments at all means the
    operation is not restricted to any context.
    """

    @abstractmethod
    def add(self, data: bytes, base_uri: Optional[str], data_format: RDFFormat,
            *contexts: Optional[Identifier]) -> None:
        """Parse ``data`` and add its statements to the given contexts."""
        pass

    @abstractmethod
    def clear(self, *contexts: Optional[Identifier]) -> None:
        """Remove statements in the given contexts, or every statement when none are given."""
        pass

    @abstractmethod
    def prepare_graph_query(self, language: QueryLanguage, query: str,
                            base_uri: Optional[str] = None) -> GraphQueryInterface:
        """Prepare a graph (CONSTRUCT/DESCRIBE) query for evaluation."""
        pass

    @abstractmethod
    def size(self, *contexts: Optional[Identifier]) -> int:
        """Count statements in the given contexts, or in the whole repository."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def is_open(self) -> bool:
        pass


class RepositoryInterface(ABC):
    """Abstract interface for a repository that hands out connections."""

    @abstractmethod
    def initialize(self) -> None:
        """
        Prepare the repository for use.

        Raises:
            RepositoryError: If the repository cannot be reached
        """
        pass

    def get_value_factory(self) -> ValueFactory:
        return ValueFactory()

    @abstractmethod
    def get_connection(self) -> RepositoryConnectionInterface:
        pass

    @abstractmethod
    def shut_down(self) -> None:
        pass
