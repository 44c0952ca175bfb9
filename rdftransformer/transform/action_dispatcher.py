"""
Action Dispatcher for RDF Transformer

Routes a resolved action to its handler and turns every outcome into a
response document:

- add:         upload the input RDF/XML document into the configured contexts
- clear:       remove statements in the configured contexts, or all statements
- graph-query: evaluate the SPARQL graph query held in the input document

Failures inside a handler never leave ``dispatch``; they are logged and
answered with an ``<error>`` document.
"""

import io
import logging
from typing import Callable, Dict, Optional

from lxml import etree

from ..dom.dom_utils import Document, document_to_bytes, bytes_to_document, document_text
from ..model.action_model import Action
from ..model.context_model import ContextSet
from ..rdf.rdfxml_writer import RDFXMLWriter
from ..repository.repository_inf import RepositoryConnectionInterface, RDFFormat, QueryLanguage
from .response_builder import success_response, error_response, exception_message

INVALID_ACTION_MESSAGE = "Invalid action parameter supplied: "
CLEAR_REFUSED_MESSAGE = "Refusing to clear the entire repository: no contexts supplied"


class ActionDispatcher:
    """
    Dispatches transformer actions against a repository connection.

    Each call to ``dispatch`` performs at most one store mutation or one
    query evaluation and always returns exactly one document.
    """

    def __init__(self, require_clear_confirmation: bool = False):
        """
        Initialize the dispatcher.

        Args:
            require_clear_confirmation: Refuse a clear that names no contexts
                instead of removing every statement in the repository
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.require_clear_confirmation = require_clear_confirmation
        self._handlers: Dict[Action, Callable[..., etree._ElementTree]] = {
            Action.ADD: self.add,
            Action.CLEAR: self.clear,
            Action.GRAPH_QUERY: self.graph_query,
        }

    def dispatch(self, action: Action, request: Document, base_uri: Optional[str],
                 contexts: ContextSet, connection: RepositoryConnectionInterface,
                 action_name: Optional[str] = None) -> etree._ElementTree:
        """
        Perform an action and return the response document.

        Args:
            action: Resolved action
            request: Input document
            base_uri: Base URI for relative URI resolution, may be None
            contexts: Contexts for add and clear
            connection: Repository connection
            action_name: Configured action name, reported for unrecognized actions

        Returns:
            ``<response>`` document, or the RDF/XML result of a graph query
        """
        handler = self._handlers.get(action)
        if handler is None:
            error_message = INVALID_ACTION_MESSAGE + str(action_name if action_name is not None else action.value)
            self.logger.error(error_message)
            return error_response(error_message)

        self.logger.info(f"Dispatching action '{action.value}'")
        try:
            return handler(request, base_uri, contexts, connection)
        except Exception as e:
            error_message = exception_message(e)
            self.logger.exception(f"Action '{action.value}' failed: {error_message}")
            return error_response(error_message)

    def add(self, request: Document, base_uri: Optional[str], contexts: ContextSet,
            connection: RepositoryConnectionInterface) -> etree._ElementTree:
        """
        Add the statements of an RDF/XML document to the repository.

        Without configured contexts the context argument is omitted and the
        store decides where the statements go.
        """
        data = document_to_bytes(request)
        self.logger.debug(f"Adding {len(data)} bytes of RDF/XML (base URI: {base_uri})")
        connection.add(data, base_uri, RDFFormat.RDF_XML, *contexts.store_arguments())
        return success_response()

    def clear(self, request: Document, base_uri: Optional[str], contexts: ContextSet,
              connection: RepositoryConnectionInterface) -> etree._ElementTree:
        """
        Remove every statement in the configured contexts.

        With no contexts this removes every statement in the repository.
        """
        if len(contexts) > 0:
            connection.clear(*contexts.store_arguments())
            return success_response()

        if self.require_clear_confirmation:
            self.logger.warning(CLEAR_REFUSED_MESSAGE)
            return error_response(CLEAR_REFUSED_MESSAGE)

        self.logger.warning("No contexts supplied: clearing all statements in the repository")
        connection.clear()
        return success_response()

    def graph_query(self, request: Document, base_uri: Optional[str], contexts: ContextSet,
                    connection: RepositoryConnectionInterface) -> etree._ElementTree:
        """
        Evaluate the SPARQL graph query held in the request's text content.

        The result replaces the ``<response>`` wrapper entirely.
        """
        query = document_text(request)
        self.logger.debug(f"Graph query: {query}")

        output = io.BytesIO()
        connection.prepare_graph_query(QueryLanguage.SPARQL, query, base_uri).evaluate(RDFXMLWriter(output))
        return bytes_to_document(output.getvalue())
