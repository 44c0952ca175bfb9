"""
RDF Transformer Value Factory

Builds rdflib terms for use as statement parts and context identifiers.
"""

from typing import Optional

from rdflib import URIRef, Literal, BNode


class ValueFactory:
    """Factory for RDF values handed to a repository connection."""

    def create_uri(self, uri: str) -> URIRef:
        """
        Create a URI resource.

        The string is not validated here. Repositories check it when the
        resource is sent to the store.

        Args:
            uri: URI string

        Returns:
            URIRef for the string
        """
        return URIRef(uri)

    def create_literal(self, value: str, datatype: Optional[str] = None,
                       language: Optional[str] = None) -> Literal:
        """
        Create a literal value.

        Args:
            value: Lexical form
            datatype: Optional datatype URI
            language: Optional language tag

        Returns:
            Literal for the value
        """
        return Literal(value, datatype=URIRef(datatype) if datatype else None, lang=language)

    def create_bnode(self, node_id: Optional[str] = None) -> BNode:
        """Create a blank node, optionally with a fixed identifier."""
        return BNode(node_id)
