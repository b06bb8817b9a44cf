"""
Query dispatcher executing query jobs against a dataset and writing their results.

Jobs run one after another in resolution order. Each result is written to a
temporary file next to its target and only moved into place once the whole
result was serialized, so a failed job never leaves a file that looks complete.
The first failing job aborts the batch; outputs of earlier jobs stay on disk.
"""

import logging
import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Sequence, Union

import rdflib.plugins.sparql as rdflib_sparql

from .domain import QueryDataset, QueryJob, QueryOutcome, ResultKind
from .errors import QueryExecutionError
from .formats import FormatRegistry, resolve_format

logger = logging.getLogger(__name__)


@contextmanager
def sparql_default_graph_only() -> Iterator[None]:
    """
    Evaluate with SPARQL default graph semantics: plain patterns see only the
    default graph, named graphs are reached through GRAPH.

    The flag is process-wide rdflib module state; this is not thread-safe.
    """
    previous = rdflib_sparql.SPARQL_DEFAULT_GRAPH_UNION
    rdflib_sparql.SPARQL_DEFAULT_GRAPH_UNION = False
    try:
        yield
    finally:
        rdflib_sparql.SPARQL_DEFAULT_GRAPH_UNION = previous


def _output_mode(path: Path) -> int:
    """Permissions an output file gets: those of the file it replaces, else 0o666 minus the umask."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@contextmanager
def atomic_output(path: Union[str, Path]) -> Iterator[BinaryIO]:
    """
    Open a binary sink whose content replaces `path` only on success.

    The finished file gets the permissions a plain open() would give it,
    or keeps those of the file it replaces.

    Raises:
        OSError: If the target directory is not writable
    """
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".part", dir=directory)
    try:
        with os.fdopen(fd, "wb") as sink:
            yield sink
            sink.flush()
        os.chmod(temp_name, _output_mode(path))
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


def evaluate(dataset: QueryDataset, query_text: str, source_name: str = "query") -> QueryOutcome:
    """
    Evaluate a query and classify the evaluator's result.

    Raises:
        QueryExecutionError: On syntax errors or evaluation failures
    """
    try:
        with sparql_default_graph_only():
            result = dataset.rdf_dataset.query(query_text)
            outcome = QueryOutcome.from_result(result)
            if outcome.kind == ResultKind.TABLE:
                # Bindings are lazy; materialize them under the same semantics
                _ = outcome.result.bindings
    except Exception as e:
        raise QueryExecutionError(f"Query {source_name} failed: {e}") from e
    return outcome


def run_query(dataset: QueryDataset, job: QueryJob, format_name: str, sink: BinaryIO,
              registry: Optional[FormatRegistry] = None) -> QueryOutcome:
    """
    Execute one query job and serialize its result to an open sink.

    Args:
        dataset: Dataset to query; it is not modified
        job: Query job to execute
        format_name: Registered output format
        sink: Open binary stream; flushed on success
        registry: Format registry (default formats when None)

    Returns:
        The evaluated QueryOutcome

    Raises:
        QueryExecutionError: On syntax errors or evaluation failures
        UnknownFormatError: If the format cannot write this kind of result
    """
    registry = registry or FormatRegistry()
    output_format = registry.get_format(format_name)
    query_text = job.read_query()

    logger.debug(f"Running query {job.source_name} as {output_format.name}")
    outcome = evaluate(dataset, query_text, job.source_name)
    writer = output_format.writer_for(outcome.kind)
    writer.write(outcome, sink)
    sink.flush()
    return outcome


def run_query_jobs(dataset: QueryDataset, jobs: Sequence[QueryJob],
                   format_name: Optional[str] = None, output_dir: str = "",
                   registry: Optional[FormatRegistry] = None) -> List[Path]:
    """
    Run every job in order, writing one result file per job.

    Returns:
        Output paths in job order

    Raises:
        The first job's error; later jobs are not run
    """
    registry = registry or FormatRegistry()
    outputs = []
    for job in jobs:
        resolved_format, output_path = resolve_format(job, format_name, output_dir, registry)
        with atomic_output(output_path) as sink:
            run_query(dataset, job, resolved_format, sink, registry)
        logger.info(f"Wrote {job.source_name} results to {output_path}")
        outputs.append(output_path)
    return outputs
