"""
DOM Utilities for RDF Transformer

Conversions between lxml document trees and bytes.
"""

from typing import Union

from lxml import etree

Document = Union[etree._ElementTree, etree._Element]


def as_tree(document: Document) -> etree._ElementTree:
    """Return the document as an element tree, wrapping a bare root element."""
    if isinstance(document, etree._ElementTree):
        return document
    return etree.ElementTree(document)


def document_to_bytes(document: Document) -> bytes:
    """
    Serialize a document unchanged to UTF-8 bytes with an XML declaration.

    Args:
        document: Element tree or root element

    Returns:
        Serialized document
    """
    return etree.tostring(as_tree(document), encoding="UTF-8", xml_declaration=True)


def bytes_to_document(data: bytes) -> etree._ElementTree:
    """
    Parse bytes into a document.

    Raises:
        lxml.etree.XMLSyntaxError: If the bytes are not well-formed XML
    """
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    return etree.ElementTree(etree.fromstring(data, parser))


def document_text(document: Document) -> str:
    """Concatenated text content of the document's root element."""
    root = as_tree(document).getroot()
    return "".join(root.itertext())
