#!/usr/bin/env python3
"""
run_query.py - Run a JSONPath query against a JSON file

Prints the matches as an indented JSON array (default) or as plain text,
one match per line. Queries can be typed in with -q or taken from the saved
queries in <config-dir>/saved_queries.json with -s.

Examples:
    python run_query.py data.json -q '$.items[?(@.price > 10)].name'
    python run_query.py data.json -q '$..id' --text
    python run_query.py data.json -s "Expensive items"
"""

import argparse
import logging
import sys

from jsonpath_extract.config import ConfigLoader, DocumentLoader
from jsonpath_extract.exceptions import QueryRunError
from jsonpath_extract.query import QueryEngine
from jsonpath_extract.rendering import QueryRunner, ResultFormatter

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate a JSONPath query against a JSON file"
    )
    parser.add_argument("file", help="Path to the JSON document")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-q", "--query", help="JSONPath query (e.g. '$.name', '$..id', '$..*')")
    source.add_argument("-s", "--saved", metavar="TITLE", help="Title of a saved query to run")
    parser.add_argument("--text", action="store_true", help="Print plain text instead of JSON (ignored with --saved)")
    parser.add_argument("--config-dir", default="configs", help="Directory holding saved_queries.json (default: configs)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    runner = QueryRunner(QueryEngine(), ResultFormatter(), ConfigLoader(args.config_dir))

    try:
        document_text = DocumentLoader().load_text(args.file)
        logger.debug(f"Loaded {len(document_text)} characters from {args.file}")
        if args.saved:
            output = runner.run_saved_query(document_text, args.saved)
        else:
            output = runner.run(document_text, args.query, not args.text)
    except (QueryRunError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not output.has_results:
        print(output.message, file=sys.stderr)
        return 0

    print(output.content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
