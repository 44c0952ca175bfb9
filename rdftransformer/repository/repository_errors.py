"""
RDF Transformer Repository Errors

Exception hierarchy raised by repository implementations.
"""


class RepositoryError(Exception):
    """Base exception for repository and connection errors."""
    pass


class RDFParseError(RepositoryError):
    """Raised when the store rejects uploaded RDF data."""
    pass


class RDFHandlerError(RepositoryError):
    """Raised when an RDF handler cannot process a statement."""
    pass


class MalformedQueryError(RepositoryError):
    """Raised when the store rejects a query as syntactically invalid."""
    pass


class QueryEvaluationError(RepositoryError):
    """Raised when a well-formed query fails during evaluation."""
    pass


class UnsupportedQueryLanguageError(RepositoryError):
    """Raised when a query language is not supported by the repository."""
    pass


class UnsupportedRDFFormatError(RepositoryError):
    """Raised when an RDF serialization format is not supported by the repository."""
    pass
