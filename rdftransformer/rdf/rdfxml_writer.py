"""
Streaming RDF/XML Writer

An RDFHandler that writes statements to a binary stream as RDF/XML as they
arrive, without collecting them into a graph first. Output goes through
lxml's incremental ``xmlfile`` writer, which handles escaping and namespace
declarations.

Namespaces reported before the first statement are declared on the
``rdf:RDF`` element. Consecutive statements about the same subject share a
single ``rdf:Description``. Blank nodes are written with document-local
``rdf:nodeID`` values.
"""

import logging
from contextlib import ExitStack
from typing import BinaryIO, Dict, Optional

from lxml import etree
from rdflib import URIRef, BNode, Literal
from rdflib.namespace import RDF, split_uri
from rdflib.term import Identifier, Node

from ..repository.repository_inf import RDFHandler
from ..repository.repository_errors import RDFHandlerError

logger = logging.getLogger(__name__)

RDF_NS = str(RDF)
XML_NS = "http://www.w3.org/XML/1998/namespace"

RDF_ROOT = f"{{{RDF_NS}}}RDF"
RDF_DESCRIPTION = f"{{{RDF_NS}}}Description"
RDF_ABOUT = f"{{{RDF_NS}}}about"
RDF_NODE_ID = f"{{{RDF_NS}}}nodeID"
RDF_RESOURCE = f"{{{RDF_NS}}}resource"
RDF_DATATYPE = f"{{{RDF_NS}}}datatype"
XML_LANG = f"{{{XML_NS}}}lang"


class RDFXMLWriter(RDFHandler):
    """
    RDF/XML writer over a binary stream.

    Usage:
        output = io.BytesIO()
        query.evaluate(RDFXMLWriter(output))
    """

    def __init__(self, stream: BinaryIO, encoding: str = "UTF-8"):
        self.stream = stream
        self.encoding = encoding
        self.namespaces: Dict[str, str] = {}
        self.statement_count = 0
        self._document: Optional[ExitStack] = None
        self._description: Optional[ExitStack] = None
        self._writer = None
        self._current_subject: Optional[Identifier] = None
        self._node_ids: Dict[BNode, str] = {}

    def start_rdf(self) -> None:
        self.namespaces = {"rdf": RDF_NS}
        self.statement_count = 0
        self._current_subject = None
        self._node_ids = {}

    def handle_namespace(self, prefix: str, uri: str) -> None:
        if self._document is not None:
            logger.debug(f"Ignoring namespace {prefix}: {uri} reported after the first statement")
            return
        if prefix in ("xml", "xmlns") or prefix in self.namespaces or uri in self.namespaces.values():
            return
        self.namespaces[prefix] = uri

    def _node_id(self, node: BNode) -> str:
        node_id = self._node_ids.get(node)
        if node_id is None:
            node_id = f"node{len(self._node_ids) + 1}"
            self._node_ids[node] = node_id
        return node_id

    def _start_document(self) -> None:
        nsmap = {(prefix or None): uri for prefix, uri in self.namespaces.items()}
        self._document = ExitStack()
        try:
            self._writer = self._document.enter_context(etree.xmlfile(self.stream, encoding=self.encoding))
            self._writer.write_declaration()
            self._document.enter_context(self._writer.element(RDF_ROOT, nsmap=nsmap))
        except ValueError as e:
            raise RDFHandlerError(f"Unable to declare namespaces {self.namespaces}: {e}") from e

    def _close_description(self) -> None:
        if self._description is not None:
            self._description.close()
            self._description = None
            self._current_subject = None

    def _open_description(self, subject: Identifier) -> None:
        if isinstance(subject, BNode):
            attrib = {RDF_NODE_ID: self._node_id(subject)}
        elif isinstance(subject, URIRef):
            attrib = {RDF_ABOUT: str(subject)}
        else:
            raise RDFHandlerError(f"Unsupported subject: {subject!r}")

        self._description = ExitStack()
        self._description.enter_context(self._writer.element(RDF_DESCRIPTION, attrib))
        self._current_subject = subject

    def _property_tag(self, predicate: Identifier) -> str:
        try:
            namespace, local_name = split_uri(predicate)
        except ValueError as e:
            raise RDFHandlerError(f"Unable to create XML name for predicate: {predicate}") from e
        return f"{{{namespace}}}{local_name}"

    def _write_property(self, tag: str, obj: Node) -> None:
        if isinstance(obj, URIRef):
            with self._writer.element(tag, {RDF_RESOURCE: str(obj)}):
                pass
        elif isinstance(obj, BNode):
            with self._writer.element(tag, {RDF_NODE_ID: self._node_id(obj)}):
                pass
        elif isinstance(obj, Literal):
            if obj.language:
                element = self._writer.element(tag, {XML_LANG: obj.language}, nsmap={"xml": XML_NS})
            elif obj.datatype is not None:
                element = self._writer.element(tag, {RDF_DATATYPE: str(obj.datatype)})
            else:
                element = self._writer.element(tag)
            with element:
                self._writer.write(str(obj))
        else:
            raise RDFHandlerError(f"Unsupported object: {obj!r}")

    def handle_statement(self, subject: Identifier, predicate: Identifier, obj: Node) -> None:
        if self._document is None:
            self._start_document()

        tag = self._property_tag(predicate)
        try:
            if subject != self._current_subject:
                self._close_description()
                self._open_description(subject)
            self._write_property(tag, obj)
        except ValueError as e:
            # lxml rejects names and text that cannot appear in XML
            raise RDFHandlerError(f"Unable to write statement ({subject}, {predicate}, {obj!r}): {e}") from e

        self.statement_count += 1

    def end_rdf(self) -> None:
        if self._document is None:
            self._start_document()
        self._close_description()
        self._document.close()
        self._document = None
        self._writer = None
        logger.debug(f"Wrote {self.statement_count} statements as RDF/XML")
