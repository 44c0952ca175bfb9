"""
Response Builder

Builds the ``<response>`` documents returned by add and clear actions and
by any failed action.
"""

import re

from lxml import etree

# Characters lxml refuses in text content
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")

RESPONSE_ELEMENT = "response"
SUCCESS_ELEMENT = "success"
ERROR_ELEMENT = "error"


def new_response_document() -> etree._ElementTree:
    """Create an empty ``<response/>`` document."""
    return etree.ElementTree(etree.Element(RESPONSE_ELEMENT))


def success_response() -> etree._ElementTree:
    """Build ``<response><success/></response>``."""
    document = new_response_document()
    etree.SubElement(document.getroot(), SUCCESS_ELEMENT)
    return document


def error_response(message: str) -> etree._ElementTree:
    """
    Build ``<response><error>message</error></response>``.

    Args:
        message: Error text for the element content

    Returns:
        Error response document
    """
    document = new_response_document()
    error = etree.SubElement(document.getroot(), ERROR_ELEMENT)
    error.text = _INVALID_XML_CHARS.sub("", message)
    return document


def exception_message(exception: BaseException) -> str:
    """Message text for an exception, falling back to its class name when empty."""
    message = str(exception).strip()
    return message or exception.__class__.__name__
