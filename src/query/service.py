"""
High-level query service providing the public interface for querying and updating ontologies.

This is the only public interface into the query module. All other components
are private implementation details.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ontology.domain import Ontology

from .builder import build_dataset
from .dispatcher import run_query_jobs
from .domain import ExecutionResult, QueryJob, QueryRequest
from .errors import MissingQueryError
from .formats import FormatRegistry
from .jobs import jobs_from_request
from .update import apply_updates, load_update_jobs

logger = logging.getLogger(__name__)


class QueryService:
    """Runs SPARQL queries or updates against an ontology."""

    def __init__(self, registry: Optional[FormatRegistry] = None):
        """Initialize the query service.

        Args:
            registry: Optional format registry. If None, the built-in formats are used.
        """
        self.registry = registry if registry is not None else FormatRegistry()

    def execute(self, ontology: Ontology, request: QueryRequest) -> ExecutionResult:
        """Run either the updates or the queries of a request.

        Updates take precedence: when any update is given, queries in the same
        request are not run.

        Args:
            ontology: Input ontology; it is never modified
            request: Queries or updates plus options

        Returns:
            ExecutionResult with the new ontology (update mode) or the written files

        Raises:
            MissingQueryError: If the request has neither queries nor updates
        """
        if request.is_update:
            return ExecutionResult(ontology=self.run_updates(ontology, request.updates))

        jobs = jobs_from_request(request)
        outputs = self.run_queries(
            ontology,
            jobs,
            format_name=request.format,
            output_dir=request.output_dir,
            use_graphs=request.use_graphs,
            include_imports=request.include_imports
        )
        return ExecutionResult(outputs=outputs)

    def run_updates(self, ontology: Ontology, update_paths: Sequence[str]) -> Ontology:
        """Apply update files in order and return the resulting ontology.

        Raises:
            MissingQueryError: If no update path is given
            MissingFileError: If an update file does not exist (before any graph is built)
            UpdateExecutionError: If an update fails
        """
        if not update_paths:
            raise MissingQueryError("At least one update must be provided")
        update_jobs = load_update_jobs(update_paths)
        return apply_updates(ontology, update_jobs)

    def run_queries(self, ontology: Ontology, jobs: Sequence[QueryJob],
                    format_name: Optional[str] = None, output_dir: str = "",
                    use_graphs: bool = False, include_imports: bool = True) -> List[Path]:
        """Build the dataset once and run every job against it, in order.

        Returns:
            Output paths in job order

        Raises:
            MissingQueryError: If jobs is empty
            GraphConstructionError: If an import is not resolved
            QueryExecutionError: On the first failing query
        """
        if not jobs:
            raise MissingQueryError()
        dataset = build_dataset(ontology, use_graphs=use_graphs, include_imports=include_imports)
        logger.info(f"Running {len(jobs)} queries against {len(dataset)} graphs")
        return run_query_jobs(dataset, jobs, format_name, output_dir, self.registry)

    def get_available_formats(self) -> List[str]:
        return self.registry.get_available_formats()
