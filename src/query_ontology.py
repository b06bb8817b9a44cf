#!/usr/bin/env python3
"""
Command-line script to run SPARQL queries or updates against an ontology.

HOW TO RUN:
The virtual environment .venv should be activated before running the script.

From the src directory, run:
    python query_ontology.py --input <ontology> --query <query.rq> <output>

Examples:
    python query_ontology.py -i data/pizza.owl -q queries/classes.rq results/classes.csv
    python query_ontology.py -i data/pizza.owl --use-graphs true -Q queries/a.rq queries/b.rq -O results
    python query_ontology.py -i data/pizza.owl -u updates/rename.ru -o data/pizza-updated.owl

When one or more --update files are given, the updates are applied in order and
the resulting ontology is saved to --output; queries in the same call are ignored.
Otherwise every query is run and its result written to its output file, or to a
file named after the query inside --output-dir.

Defaults can be set with ONTOLOGY_QUERY_* environment variables or a .env file.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

# Add src to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ontology.service import OntologyService
from ontology.store import OntologyStore
from query.config import QueryConfig, parse_bool
from query.domain import ImportsMode, QueryRequest
from query.service import QueryService

logger = logging.getLogger(__name__)


def build_parser(config: QueryConfig) -> argparse.ArgumentParser:
    """Create the argument parser; defaults come from the configuration."""
    parser = argparse.ArgumentParser(
        description="Query an ontology with SPARQL or apply SPARQL updates to it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run a query and write its result as CSV
  python query_ontology.py -i pizza.owl -q classes.rq classes.csv

  # Run several queries, outputs named after the queries
  python query_ontology.py -i pizza.owl -Q a.rq b.rq -O results

  # Query imports as named graphs
  python query_ontology.py -i pizza.owl --imports graphs -q graphs.rq graphs.tsv

  # Apply updates and save the result
  python query_ontology.py -i pizza.owl -u fix-labels.ru -o pizza-fixed.owl
        """
    )

    parser.add_argument("-i", "--input", help="Load ontology from a file")
    parser.add_argument("-I", "--input-iri", help="Load ontology from an IRI")
    parser.add_argument("--catalog", default=config.catalog,
                        help="XML catalog used to resolve imports")
    parser.add_argument("-f", "--format", default=config.format,
                        help="Query result format: csv, tsv, ttl, jsonld, etc.")
    parser.add_argument("-o", "--output", help="Save the updated ontology to a file")
    parser.add_argument("-O", "--output-dir", default=config.output_dir,
                        help="Directory for query results without an explicit output")
    parser.add_argument("-g", "--use-graphs", default=str(config.use_graphs).lower(),
                        metavar="BOOL", help="If true, load imports as named graphs")
    parser.add_argument("--imports", metavar="MODE",
                        help="How to handle imports: union, graphs, or ignore")
    parser.add_argument("-u", "--update", action="append", default=[],
                        help="Run a SPARQL UPDATE from a file (repeatable, applied in order)")
    parser.add_argument("-q", "--query", nargs=2, action="append", default=[],
                        metavar=("QUERY", "OUTPUT"), help="Run a SPARQL query")
    parser.add_argument("-s", "--select", nargs=2, action="append", default=[],
                        metavar=("QUERY", "OUTPUT"), help="Run a SPARQL SELECT query (deprecated)")
    parser.add_argument("-c", "--construct", nargs=2, action="append", default=[],
                        metavar=("QUERY", "OUTPUT"), help="Run a SPARQL CONSTRUCT query (deprecated)")
    parser.add_argument("-Q", "--queries", nargs="+", action="extend", default=[],
                        metavar="QUERY", help="Verify one or more SPARQL queries")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def request_from_args(args: argparse.Namespace) -> QueryRequest:
    """Translate parsed arguments into a QueryRequest.

    Raises:
        ImportsOptionError: If --imports has an unsupported value
    """
    if args.imports:
        mode = ImportsMode.parse(args.imports)
    elif parse_bool(args.use_graphs):
        mode = ImportsMode.GRAPHS
    else:
        mode = ImportsMode.UNION

    return QueryRequest.with_imports_mode(
        mode,
        format=args.format,
        output_dir=args.output_dir or "",
        query=[tuple(pair) for pair in args.query],
        select=[tuple(pair) for pair in args.select],
        construct=[tuple(pair) for pair in args.construct],
        verify=list(args.queries),
        updates=list(args.update)
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    config = QueryConfig.from_env()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format='%(levelname)s: %(message)s'
    )

    if not args.input and not args.input_iri:
        parser.error("one of --input or --input-iri is required")

    try:
        request = request_from_args(args)

        ontology_service = OntologyService(OntologyStore(catalog_path=args.catalog))
        ontology = ontology_service.load_ontology(path=args.input, iri=args.input_iri)
        stats = ontology_service.get_statistics(ontology)
        print(f"Loaded ontology: {stats.iri} ({stats.direct_triples} triples, "
              f"{stats.import_count} imports, {stats.resolved_import_count} resolved)")
        for import_iri in stats.unresolved_imports:
            print(f"  Unresolved import: {import_iri}")

        result = QueryService().execute(ontology, request)

        if result.is_update:
            print(f"✓ Applied {len(request.updates)} updates "
                  f"({result.ontology.direct_axiom_count} triples)")
            if args.output:
                ontology_service.save_ontology(result.ontology, args.output)
                print(f"  Saved ontology to: {args.output}")
        else:
            for output_path in result.outputs:
                print(f"✓ Wrote {output_path}")
        return 0

    except ValueError as e:
        print(f"✗ Invalid input: {e}")
        return 1
    except Exception as e:
        print(f"✗ Error running query: {e}")
        logger.debug("Query failed", exc_info=True)
        return 1


if __name__ == "__main__":
    exit(main())
