#!/usr/bin/env python3
"""
RDF Transformer Command Line Interface

Runs the transformer stage once over an XML document read from a file or
stdin and writes the response document to stdout.
"""

import argparse
import sys
from typing import Dict, List, Optional

from dotenv import load_dotenv
from lxml import etree

from rdftransformer import __version__
from rdftransformer.config.config_loader import (
    TransformerConfig, ConfigurationError, configure_logging,
    URL_PARAM, REPOSITORY_ID_PARAM, ACTION_PARAM, CONTEXTS_PARAM, BASE_URI_PARAM
)
from rdftransformer.repository.repository_errors import RepositoryError
from rdftransformer.transform.rdf_transformer import RDFTransformer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the RDF transformer."""
    parser = argparse.ArgumentParser(
        description="RDF Transformer - perform an action against a Sesame/RDF4J repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rdftransformer --repository books --action add data.rdf
  rdftransformer --repository books --action clear --contexts "http://example.org/g1 null" -
  rdftransformer --repository books --action graph-query query.xml
        """
    )

    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Input XML document ('-' reads stdin). Default: -"
    )
    parser.add_argument("--config", "-c", type=str, help="Path to YAML configuration file")
    parser.add_argument("--url", type=str, help="Triple-store server URL")
    parser.add_argument("--repository", "-r", type=str, help="Repository identifier")
    parser.add_argument("--action", "-a", type=str, help="Action: add, clear or graph-query")
    parser.add_argument("--contexts", type=str, help="Space-separated contexts ('null' for the null context)")
    parser.add_argument("--base-uri", type=str, help="Base URI for relative URI resolution")
    parser.add_argument("--log-level", type=str, help="Log level (overrides app.log_level)")
    parser.add_argument("--version", action="version", version=f"RDF Transformer {__version__}")

    return parser.parse_args(argv)


def _stage_parameters(args: argparse.Namespace) -> Dict[str, str]:
    parameters = {
        URL_PARAM: args.url,
        REPOSITORY_ID_PARAM: args.repository,
        ACTION_PARAM: args.action,
        CONTEXTS_PARAM: args.contexts,
        BASE_URI_PARAM: args.base_uri,
    }
    return {name: value for name, value in parameters.items() if value is not None}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the RDF transformer command-line interface."""
    load_dotenv()
    args = parse_args(argv)

    try:
        config = TransformerConfig(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or config.get_log_level())

    try:
        source = sys.stdin.buffer if args.input == "-" else args.input
        document = etree.parse(source)
    except (OSError, etree.XMLSyntaxError) as e:
        print(f"Unable to read input document: {e}", file=sys.stderr)
        return 1

    try:
        with RDFTransformer(config) as transformer:
            transformer.setup(_stage_parameters(args))
            response = transformer.transform(document)
    except (ConfigurationError, RepositoryError) as e:
        print(f"Error setting up transformer: {e}", file=sys.stderr)
        return 1

    sys.stdout.buffer.write(etree.tostring(response, encoding="UTF-8", xml_declaration=True, pretty_print=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
