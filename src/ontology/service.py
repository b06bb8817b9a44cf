"""
High-level ontology service providing the public interface for loading and saving ontologies.

This is the only public interface into the ontology module. All other components
are private implementation details.
"""

from pathlib import Path
from typing import List, Optional, Union
from rdflib import URIRef

from .domain import Ontology, OntologyStats
from .store import OntologyStore


class OntologyService:
    """High-level interface for ontology input and output."""

    def __init__(self, store: Optional[OntologyStore] = None):
        """Initialize the ontology service.

        Args:
            store: Optional ontology store. If None, creates a new one.
        """
        self.store = store if store is not None else OntologyStore()

    def load_ontology(self, path: Optional[Union[str, Path]] = None,
                      iri: Optional[str] = None) -> Ontology:
        """Load an ontology from a file or an IRI.

        Args:
            path: Path of an ontology document
            iri: IRI of an ontology (used when no path is given)

        Returns:
            The loaded Ontology with its imports resolved where possible

        Raises:
            ValueError: If neither path nor IRI is given
            FileNotFoundError: If the path does not exist
        """
        if path is not None:
            return self.store.load_file(path)
        if iri:
            return self.store.load_iri(iri)
        raise ValueError("An input ontology file or IRI must be provided")

    def save_ontology(self, ontology: Ontology, path: Union[str, Path],
                      format: Optional[str] = None) -> str:
        """Save an ontology; the format is guessed from the extension when not given."""
        return self.store.save(ontology, path, format)

    def get_statistics(self, ontology: Ontology) -> OntologyStats:
        """Summarize an ontology and the state of its import closure."""
        unresolved = self.find_unresolved_imports(ontology)
        return OntologyStats(
            iri=str(ontology.iri) if ontology.iri is not None else None,
            direct_triples=ontology.direct_axiom_count,
            import_count=len(ontology.imports),
            resolved_import_count=len(ontology.imported),
            unresolved_imports=[str(iri) for iri in unresolved]
        )

    def find_unresolved_imports(self, ontology: Ontology) -> List[URIRef]:
        """List import IRIs anywhere in the closure that have no loaded ontology."""
        return [import_iri for import_iri, resolved, _ in ontology.iter_import_closure() if resolved is None]
