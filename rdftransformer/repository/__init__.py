"""
RDF Transformer Repository

Triple-store connections used by the transformer.
"""

from .repository_inf import (
    RepositoryInterface, RepositoryConnectionInterface, GraphQueryInterface,
    RDFHandler, RDFFormat, QueryLanguage
)
from .repository_errors import (
    RepositoryError, RDFParseError, RDFHandlerError, MalformedQueryError,
    QueryEvaluationError, UnsupportedQueryLanguageError, UnsupportedRDFFormatError
)
from .value_factory import ValueFactory
from .http_repository import HTTPRepository
from .memory_repository import MemoryRepository

__all__ = [
    'RepositoryInterface',
    'RepositoryConnectionInterface',
    'GraphQueryInterface',
    'RDFHandler',
    'RDFFormat',
    'QueryLanguage',
    'RepositoryError',
    'RDFParseError',
    'RDFHandlerError',
    'MalformedQueryError',
    'QueryEvaluationError',
    'UnsupportedQueryLanguageError',
    'UnsupportedRDFFormatError',
    'ValueFactory',
    'HTTPRepository',
    'MemoryRepository',
]
