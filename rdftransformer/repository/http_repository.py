"""
HTTP Repository for RDF Transformer

This module talks to a Sesame/RDF4J-compatible triple store through its
REST protocol:

- GET    {server}/protocol                         reachability check
- POST   {server}/repositories/{id}/statements     add RDF data
- DELETE {server}/repositories/{id}/statements     clear contexts
- GET    {server}/repositories/{id}/size           statement count
- POST   {server}/repositories/{id}                evaluate a query

Context parameters are encoded the way the protocol expects: ``<uri>`` for
a resource, ``_:id`` for a blank node and ``null`` for the null context.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

import requests
from rdflib import URIRef, BNode
from rdflib.exceptions import ParserError
from rdflib.plugins.parsers.ntriples import W3CNTriplesParser
from rdflib.term import Identifier

from .repository_inf import (
    RepositoryInterface, RepositoryConnectionInterface, GraphQueryInterface,
    RDFHandler, RDFFormat, QueryLanguage
)
from .repository_errors import (
    RepositoryError, RDFParseError, MalformedQueryError, QueryEvaluationError,
    UnsupportedQueryLanguageError
)

logger = logging.getLogger(__name__)

# Characters that may not appear unescaped in an IRI reference.
_INVALID_URI_CHARS = re.compile(r'[\s<>"{}|\\^`]')


def encode_resource(value: Optional[Identifier]) -> str:
    """
    Encode a context or base URI value as a protocol parameter.

    Args:
        value: URI resource, blank node, or None for the null context

    Returns:
        Encoded parameter value

    Raises:
        RepositoryError: If the value is not an absolute URI
    """
    if value is None:
        return "null"
    if isinstance(value, BNode):
        return f"_:{value}"

    uri = str(value)
    if ":" not in uri or _INVALID_URI_CHARS.search(uri):
        raise RepositoryError(f"Not a valid (absolute) URI: {uri}")
    return f"<{uri}>"


def _context_params(contexts: Tuple[Optional[Identifier], ...]) -> List[Tuple[str, str]]:
    return [("context", encode_resource(context)) for context in contexts]


class _HandlerSink:
    """N-Triples parser sink passing each statement straight to an RDFHandler."""

    def __init__(self, handler: RDFHandler):
        self.handler = handler
        self.count = 0

    def triple(self, subject, predicate, obj) -> None:
        self.handler.handle_statement(subject, predicate, obj)
        self.count += 1


class HTTPGraphQuery(GraphQueryInterface):
    """Graph query evaluated by the remote store, results delivered as N-Triples."""

    def __init__(self, connection: "HTTPRepositoryConnection", query: str,
                 base_uri: Optional[str] = None):
        self.connection = connection
        self.query = query
        self.base_uri = base_uri

    def evaluate(self, handler: RDFHandler) -> None:
        """
        Send the query to the store and stream the resulting statements to the handler.

        The response is read line by line; each statement reaches the handler
        as soon as its line has been parsed, in the order the store sent it.

        Args:
            handler: Receiver for the result statements

        Raises:
            MalformedQueryError: If the store rejects the query
            QueryEvaluationError: If evaluation or result parsing fails
        """
        data: Dict[str, str] = {
            "query": self.query,
            "queryLn": QueryLanguage.SPARQL.value,
            "infer": "true",
        }
        if self.base_uri:
            data["baseURI"] = encode_resource(URIRef(self.base_uri))

        logger.debug(f"Evaluating graph query: {self.query}")
        response = self.connection._request(
            "POST",
            self.connection.repository.repository_url,
            data=data,
            headers={"Accept": RDFFormat.N_TRIPLES.mime_type},
            failure=QueryEvaluationError,
            stream=True,
        )

        sink = _HandlerSink(handler)
        parser = W3CNTriplesParser(sink=sink)
        handler.start_rdf()
        try:
            for line in response.iter_lines():
                parser.parsestring(line)
        except (ParserError, ValueError) as e:
            raise QueryEvaluationError(f"Unable to parse graph query result: {e}") from e
        finally:
            response.close()
        handler.end_rdf()
        logger.debug(f"Graph query returned {sink.count} statements")


class HTTPRepositoryConnection(RepositoryConnectionInterface):
    """Connection to one remote repository, sharing the repository's HTTP session."""

    def __init__(self, repository: "HTTPRepository"):
        self.repository = repository
        self._open = True

    def _request(self, method: str, url: str, failure=RepositoryError, **kwargs) -> requests.Response:
        """
        Issue an HTTP request and translate failures into repository errors.

        Args:
            method: HTTP method
            url: Request URL
            failure: Exception class for non-2xx statuses the protocol does not classify
            **kwargs: Additional request parameters

        Returns:
            Successful response

        Raises:
            RepositoryError: If the connection is closed or the request fails
        """
        if not self._open:
            raise RepositoryError("Connection has been closed")

        session = self.repository._get_session()
        try:
            response = session.request(method, url, timeout=self.repository.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise RepositoryError(f"Failed to communicate with {url}: {e}") from e

        if 200 <= response.status_code < 300:
            return response

        error_text = response.text.strip()
        logger.debug(f"{method} {url} failed: {response.status_code} - {error_text}")
        if response.status_code == 400:
            if error_text.startswith("MALFORMED QUERY"):
                raise MalformedQueryError(error_text)
            if error_text.startswith("MALFORMED DATA"):
                raise RDFParseError(error_text)
        raise failure(f"{method} {url} failed: {response.status_code} - {error_text or response.reason}")

    def add(self, data: bytes, base_uri: Optional[str], data_format: RDFFormat,
            *contexts: Optional[Identifier]) -> None:
        params = _context_params(contexts)
        if base_uri:
            params.append(("baseURI", encode_resource(URIRef(base_uri))))

        logger.debug(f"Adding {len(data)} bytes of {data_format.name} to {len(contexts)} context(s)")
        self._request(
            "POST",
            self.repository.statements_url,
            params=params,
            data=data,
            headers={"Content-Type": f"{data_format.mime_type};charset=UTF-8"},
        )

    def clear(self, *contexts: Optional[Identifier]) -> None:
        self._request("DELETE", self.repository.statements_url, params=_context_params(contexts))

    def prepare_graph_query(self, language: QueryLanguage, query: str,
                            base_uri: Optional[str] = None) -> HTTPGraphQuery:
        if language is not QueryLanguage.SPARQL:
            raise UnsupportedQueryLanguageError(f"Unsupported query language: {language}")
        return HTTPGraphQuery(self, query, base_uri)

    def size(self, *contexts: Optional[Identifier]) -> int:
        response = self._request("GET", self.repository.size_url, params=_context_params(contexts))
        try:
            return int(response.text.strip())
        except ValueError as e:
            raise RepositoryError(f"Unexpected size response: {response.text!r}") from e

    def close(self) -> None:
        self._open = False

    def is_open(self) -> bool:
        return self._open


class HTTPRepository(RepositoryInterface):
    """
    Remote repository on a Sesame/RDF4J server.

    Holds one ``requests.Session`` shared by the connections it hands out.
    """

    def __init__(self, server_url: str, repository_id: str,
                 username: Optional[str] = None, password: Optional[str] = None,
                 timeout: int = 30):
        """
        Initialize the HTTP repository.

        Args:
            server_url: Server URL (e.g., 'http://localhost:9999/sesame/')
            repository_id: Repository identifier on that server
            username: Optional username for basic authentication
            password: Optional password for basic authentication
            timeout: Request timeout in seconds
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.server_url = server_url.rstrip('/')
        self.repository_id = repository_id
        self.username = username
        self.password = password
        self.timeout = timeout

        self.protocol_url = f"{self.server_url}/protocol"
        self.repository_url = f"{self.server_url}/repositories/{self.repository_id}"
        self.statements_url = f"{self.repository_url}/statements"
        self.size_url = f"{self.repository_url}/size"

        self.session: Optional[requests.Session] = None

    def _get_session(self) -> requests.Session:
        """Get the HTTP session, failing if the repository is not initialized."""
        if self.session is None:
            raise RepositoryError("Repository has not been initialized")
        return self.session

    def initialize(self) -> None:
        if self.session is not None:
            self.logger.warning("Repository is already initialized")
            return

        self.session = requests.Session()
        self.session.headers.update({'User-Agent': 'RDF-Transformer/1.0'})
        if self.username and self.password:
            self.session.auth = (self.username, self.password)

        try:
            response = self.session.get(self.protocol_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self._cleanup_session()
            raise RepositoryError(f"Unable to reach server at {self.server_url}: {e}") from e

        self.logger.info(
            f"Connected to repository '{self.repository_id}' at {self.server_url} "
            f"(protocol {response.text.strip()})"
        )

    def get_connection(self) -> HTTPRepositoryConnection:
        self._get_session()
        return HTTPRepositoryConnection(self)

    def _cleanup_session(self) -> None:
        if self.session:
            try:
                self.session.close()
            except Exception as e:
                self.logger.warning(f"Error closing session: {e}")
            finally:
                self.session = None

    def shut_down(self) -> None:
        self._cleanup_session()
        self.logger.info(f"Shut down repository '{self.repository_id}'")

    def __str__(self) -> str:
        return f"HTTPRepository(url={self.repository_url})"
