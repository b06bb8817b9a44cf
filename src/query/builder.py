"""
Dataset builder turning an ontology and its import closure into queryable graphs.

Three layouts are supported:
- union: the ontology and every transitively imported ontology merged into the default graph
- named graphs: the ontology's own axioms in the default graph, each import in a graph named by its IRI
- ignore imports: only the ontology's own axioms in the default graph
"""

import logging
from typing import Iterator, Tuple

from rdflib import Graph, URIRef

from ontology.domain import Ontology

from .domain import DEFAULT_GRAPH, QueryDataset
from .errors import GraphConstructionError

logger = logging.getLogger(__name__)


def iter_import_closure(ontology: Ontology) -> Iterator[Tuple[URIRef, Ontology]]:
    """
    Yield (import IRI, ontology) for every direct and transitive import, breadth first.

    Raises:
        GraphConstructionError: If an import has no resolved ontology
    """
    for import_iri, imported, importer in ontology.iter_import_closure():
        if imported is None:
            raise GraphConstructionError(
                f"Import {import_iri} of {importer.iri} is not resolved to a loaded ontology"
            )
        yield import_iri, imported


def _copy_into(target: Graph, source: Graph) -> None:
    for prefix, namespace in source.namespaces():
        target.bind(prefix, namespace, override=False)
    for triple in source:
        target.add(triple)


def build_graph(ontology: Ontology, include_imports: bool = True) -> Graph:
    """Merge the ontology (and by default its import closure) into a new graph."""
    graph = Graph()
    _copy_into(graph, ontology.axioms)
    if include_imports:
        for _, imported in iter_import_closure(ontology):
            _copy_into(graph, imported.axioms)
    return graph


def build_dataset(ontology: Ontology, use_graphs: bool = False,
                  include_imports: bool = True) -> QueryDataset:
    """
    Build the dataset queries run against.

    Args:
        ontology: Ontology to expose; it is not modified
        use_graphs: Put each import into its own named graph instead of merging
        include_imports: When False, imports are ignored entirely

    Returns:
        QueryDataset with the default graph and, in named-graph mode, one graph per import

    Raises:
        GraphConstructionError: If an import in the closure is not resolved
    """
    if not include_imports:
        dataset = QueryDataset({DEFAULT_GRAPH: build_graph(ontology, include_imports=False)})
        logger.info(f"Built dataset for {ontology.iri} ignoring imports: {len(dataset.default_graph)} triples")
        return dataset

    if not use_graphs:
        dataset = QueryDataset({DEFAULT_GRAPH: build_graph(ontology)})
        logger.info(f"Built union dataset for {ontology.iri}: {len(dataset.default_graph)} triples")
        return dataset

    default_graph = Graph()
    _copy_into(default_graph, ontology.axioms)
    graphs = {DEFAULT_GRAPH: default_graph}
    for import_iri, imported in iter_import_closure(ontology):
        named = Graph(identifier=import_iri)
        _copy_into(named, imported.axioms)
        graphs[import_iri] = named
        logger.debug(f"Added named graph {import_iri} with {len(named)} triples")

    dataset = QueryDataset(graphs)
    logger.info(f"Built dataset for {ontology.iri} with {len(dataset.named_graphs)} named graphs")
    return dataset
