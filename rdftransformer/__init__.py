"""
RDF Transformer

XML pipeline stage that adds RDF/XML documents to, clears contexts in, and
runs SPARQL graph queries against a Sesame/RDF4J triple store.
"""

__version__ = "0.1.0"
