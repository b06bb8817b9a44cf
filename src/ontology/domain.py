"""
Domain models for the ontology module.

An ontology is kept as an rdflib graph of its own triples plus an explicit,
ordered list of import declarations. Imported ontologies that the loader
managed to resolve are attached by IRI so that the import closure can be
walked without touching the file system again.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple
from rdflib import Graph, URIRef, RDF, OWL


@dataclass
class Ontology:
    """Represents a loaded ontology with its import declarations."""

    iri: Optional[URIRef]
    axioms: Graph = field(default_factory=Graph)           # every triple except own owl:imports
    imports: List[URIRef] = field(default_factory=list)    # import declarations, in order
    imported: Dict[URIRef, "Ontology"] = field(default_factory=dict)  # resolved imports
    source: Optional[str] = None                           # file path or IRI it was loaded from

    @property
    def direct_axiom_count(self) -> int:
        """Number of triples declared directly in this ontology."""
        return len(self.axioms)

    def get_imported(self, import_iri: URIRef) -> Optional["Ontology"]:
        """Return the resolved ontology for an import declaration, if any."""
        return self.imported.get(URIRef(import_iri))

    def add_import(self, import_iri: URIRef, resolved: Optional["Ontology"] = None) -> None:
        """Declare an import, optionally attaching the resolved ontology."""
        import_iri = URIRef(import_iri)
        if import_iri not in self.imports:
            self.imports.append(import_iri)
        if resolved is not None:
            self.imported[import_iri] = resolved

    def copy_imports_to(self, other: "Ontology") -> None:
        """Copy every import declaration (and its resolution) onto another ontology."""
        for import_iri in self.imports:
            other.add_import(import_iri, self.imported.get(import_iri))

    def iter_import_closure(self) -> Iterator[Tuple[URIRef, Optional["Ontology"], "Ontology"]]:
        """
        Walk direct and transitive imports breadth first.

        Yields (import IRI, resolved ontology or None, importing ontology).
        Each import IRI is visited once, so import cycles terminate.
        """
        seen: Set[URIRef] = {self.iri} if self.iri is not None else set()
        pending = [self]
        while pending:
            current = pending.pop(0)
            for import_iri in current.imports:
                if import_iri in seen:
                    continue
                seen.add(import_iri)
                imported = current.get_imported(import_iri)
                yield import_iri, imported, current
                if imported is not None:
                    pending.append(imported)

    def to_rdf_graph(self) -> Graph:
        """Graph with the axioms plus the ontology header and owl:imports triples."""
        graph = Graph()
        for prefix, namespace in self.axioms.namespaces():
            graph.bind(prefix, namespace, override=False)
        graph += self.axioms
        if self.iri is not None:
            graph.add((self.iri, RDF.type, OWL.Ontology))
            for import_iri in self.imports:
                graph.add((self.iri, OWL.imports, import_iri))
        return graph

    def __len__(self) -> int:
        return self.direct_axiom_count


@dataclass
class OntologyStats:
    """Basic statistics about an ontology and its import closure."""

    iri: Optional[str]
    direct_triples: int
    import_count: int
    resolved_import_count: int
    unresolved_imports: List[str]
