"""
Query module for running SPARQL queries and updates against ontologies.

This module provides a unified interface through QueryService. Dataset
construction, job resolution, format resolution and update handling are
implementation details behind it.
"""

# Main public interface
from .service import QueryService
from .domain import QueryRequest, ExecutionResult

# Export only the public interface
__all__ = ['QueryService', 'QueryRequest', 'ExecutionResult']
