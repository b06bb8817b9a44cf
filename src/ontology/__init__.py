"""
Ontology Loading & Serialization Module

This module keeps ontologies in memory as rdflib graphs with explicit
import declarations, resolving imports through catalogs, sibling files or IRIs.

Public Interface:
- OntologyService: High-level service for loading and saving ontologies
- Ontology: The in-memory ontology model

Private Components:
- OntologyStore: Registry of loaded ontologies keyed by IRI
"""

from .domain import Ontology
from .service import OntologyService

__all__ = ["OntologyService", "Ontology"]
