"""
In-memory store of loaded ontologies.

The store parses ontology documents with rdflib, splits the import
declarations off the axioms and resolves each import to another ontology,
either through an XML catalog, a sibling file or by fetching the IRI.
Every ontology is registered under its IRI so shared imports are parsed once.
"""

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union

from rdflib import Graph, URIRef, RDF, OWL
from rdflib.util import guess_format

from .domain import Ontology

logger = logging.getLogger(__name__)

CATALOG_NS = "urn:oasis:names:tc:entity:xmlns:xml:catalog"
DEFAULT_CATALOG_NAME = "catalog-v001.xml"


class OntologyStore:
    """Simple registry of ontologies keyed by IRI."""

    def __init__(self, catalog_path: Optional[str] = None, resolve_remote: bool = True):
        """
        Initialize the ontology store.

        Args:
            catalog_path: Optional XML catalog mapping import IRIs to local files
            resolve_remote: Whether imports without a local mapping are fetched by IRI
        """
        self.ontologies: Dict[URIRef, Ontology] = {}
        self.catalog: Dict[str, str] = {}
        self.resolve_remote = resolve_remote
        if catalog_path:
            self.load_catalog(catalog_path)

    def load_catalog(self, catalog_path: str) -> Dict[str, str]:
        """Read an OASIS XML catalog and merge its uri mappings into the store."""
        base_dir = os.path.dirname(os.path.abspath(catalog_path))
        tree = ET.parse(catalog_path)
        mappings = {}
        for element in tree.getroot().iter(f"{{{CATALOG_NS}}}uri"):
            name = element.get("name")
            uri = element.get("uri")
            if not name or not uri:
                continue
            if "://" not in uri:
                uri = os.path.normpath(os.path.join(base_dir, uri))
            mappings[name] = uri
        logger.info(f"Loaded {len(mappings)} catalog mappings from {catalog_path}")
        self.catalog.update(mappings)
        return mappings

    def load_file(self, path: Union[str, Path], format: Optional[str] = None) -> Ontology:
        """Load an ontology document from disk, resolving its imports."""
        path = str(path)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Ontology file does not exist: {path}")

        # A catalog next to the input applies unless one was given explicitly
        if not self.catalog:
            sibling_catalog = os.path.join(os.path.dirname(os.path.abspath(path)), DEFAULT_CATALOG_NAME)
            if os.path.exists(sibling_catalog):
                self.load_catalog(sibling_catalog)

        graph = self._parse(path, format)
        return self._register(graph, source=path)

    def load_iri(self, iri: str, format: Optional[str] = None) -> Ontology:
        """Load an ontology by IRI, honouring catalog mappings."""
        iri_ref = URIRef(iri)
        if iri_ref in self.ontologies:
            return self.ontologies[iri_ref]
        location = self.catalog.get(str(iri), str(iri))
        graph = self._parse(location, format)
        return self._register(graph, source=str(iri), fallback_iri=iri_ref)

    def get(self, iri: str) -> Optional[Ontology]:
        """Return a previously loaded ontology."""
        return self.ontologies.get(URIRef(iri))

    def save(self, ontology: Ontology, path: Union[str, Path], format: Optional[str] = None) -> str:
        """Serialize an ontology (header, imports and axioms) to a file."""
        path = str(path)
        rdf_format = format or guess_format(path) or "xml"
        graph = ontology.to_rdf_graph()
        graph.serialize(destination=path, format=rdf_format)
        logger.info(f"Saved ontology {ontology.iri} ({len(graph)} triples) to {path}")
        return path

    def split_graph(self, graph: Graph, fallback_iri: Optional[URIRef] = None,
                    source: Optional[str] = None) -> Ontology:
        """Turn a parsed graph into an Ontology without resolving its imports."""
        iri = self._find_ontology_iri(graph) or fallback_iri

        imports: List[URIRef] = []
        if iri is not None:
            imports = sorted(
                (o for o in graph.objects(iri, OWL.imports) if isinstance(o, URIRef)),
                key=str
            )

        axioms = Graph()
        for prefix, namespace in graph.namespaces():
            axioms.bind(prefix, namespace, override=False)
        for triple in graph:
            if iri is not None and triple[0] == iri and triple[1] == OWL.imports:
                continue
            axioms.add(triple)

        return Ontology(iri=iri, axioms=axioms, imports=imports, source=source)

    def _register(self, graph: Graph, source: str,
                  fallback_iri: Optional[URIRef] = None) -> Ontology:
        ontology = self.split_graph(graph, fallback_iri=fallback_iri, source=source)
        if ontology.iri is not None:
            # Register before resolving imports so cycles terminate
            self.ontologies[ontology.iri] = ontology
        logger.info(f"Loaded ontology {ontology.iri} from {source}: "
                    f"{len(ontology.axioms)} triples, {len(ontology.imports)} imports")

        for import_iri in ontology.imports:
            resolved = self._resolve_import(import_iri, source)
            if resolved is not None:
                ontology.imported[import_iri] = resolved
        return ontology

    def _resolve_import(self, import_iri: URIRef, importer_source: str) -> Optional[Ontology]:
        """Find the ontology behind an import declaration, or None."""
        if import_iri in self.ontologies:
            return self.ontologies[import_iri]

        candidates = []
        if str(import_iri) in self.catalog:
            candidates.append(self.catalog[str(import_iri)])
        if importer_source and os.path.exists(importer_source):
            # Sibling file named like the last IRI segment
            local_name = str(import_iri).rstrip("/").rsplit("/", 1)[-1]
            sibling = os.path.join(os.path.dirname(os.path.abspath(importer_source)), local_name)
            if local_name and os.path.exists(sibling):
                candidates.append(sibling)
        if self.resolve_remote:
            candidates.append(str(import_iri))

        for location in candidates:
            try:
                graph = self._parse(location)
            except Exception as e:
                logger.warning(f"Could not load import {import_iri} from {location}: {e}")
                continue
            return self._register(graph, source=location, fallback_iri=import_iri)

        logger.warning(f"Import {import_iri} could not be resolved")
        return None

    def _parse(self, location: str, format: Optional[str] = None) -> Graph:
        graph = Graph()
        rdf_format = format or guess_format(location)
        if rdf_format is None and os.path.exists(location):
            rdf_format = "xml"
        graph.parse(location, format=rdf_format)
        return graph

    def _find_ontology_iri(self, graph: Graph) -> Optional[URIRef]:
        iris = sorted((s for s in graph.subjects(RDF.type, OWL.Ontology) if isinstance(s, URIRef)), key=str)
        if not iris:
            return None
        # The importing ontology is the one no other header imports
        imported = set(graph.objects(None, OWL.imports))
        roots = [iri for iri in iris if iri not in imported]
        return roots[0] if roots else iris[0]
