"""
SPARQL UPDATE execution and conversion of the updated graph back into an ontology.

Updates always run against the flattened import closure. A graph has no
notion of OWL imports, so the import declarations of the input ontology are
carried over to the new ontology here rather than by the update evaluator.
"""

import logging
from typing import Iterable, List, Sequence

from rdflib import Graph, OWL

from ontology.domain import Ontology

from .builder import build_graph
from .domain import UpdateJob
from .errors import UpdateExecutionError

logger = logging.getLogger(__name__)


def load_update_jobs(paths: Iterable[str]) -> List[UpdateJob]:
    """
    Read every update file, in order, before anything else happens.

    Raises:
        MissingFileError: If an update file does not exist
    """
    return [UpdateJob.from_file(path) for path in paths]


def execute_updates(graph: Graph, update_jobs: Sequence[UpdateJob]) -> Graph:
    """
    Apply updates to a graph in the order given.

    Raises:
        UpdateExecutionError: On the first update that fails to parse or apply
    """
    for job in update_jobs:
        logger.debug(f"Running update '{job.label}'")
        try:
            graph.update(job.text)
        except Exception as e:
            raise UpdateExecutionError(f"Update '{job.label}' failed: {e}") from e
    return graph


def graph_to_ontology(graph: Graph, source: Ontology) -> Ontology:
    """
    Build a new ontology from a graph, keeping the source's IRI and import declarations.

    owl:imports statements found in the graph are not axioms and are dropped;
    the new ontology declares exactly the imports the source declared.
    """
    axioms = Graph()
    for prefix, namespace in graph.namespaces():
        axioms.bind(prefix, namespace, override=False)
    for triple in graph:
        if triple[1] == OWL.imports:
            continue
        axioms.add(triple)

    ontology = Ontology(iri=source.iri, axioms=axioms, source=source.source)
    if len(source.imports) > 0:
        source.copy_imports_to(ontology)
    return ontology


def apply_updates(ontology: Ontology, update_jobs: Sequence[UpdateJob]) -> Ontology:
    """
    Run updates over the ontology's import closure and return the resulting ontology.

    The input ontology is not modified.

    Raises:
        GraphConstructionError: If an import in the closure is not resolved
        UpdateExecutionError: If any update fails; no ontology is produced then
    """
    graph = build_graph(ontology)
    logger.info(f"Applying {len(update_jobs)} updates to {len(graph)} triples")
    execute_updates(graph, update_jobs)
    return graph_to_ontology(graph, ontology)
