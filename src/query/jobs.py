"""
Normalization of query inputs into an ordered list of query jobs.

Explicit query/output pairs, the deprecated select and construct pairs and
bare verification queries all end up as QueryJob objects here; nothing
downstream knows which option a job came from.
"""

from typing import Iterable, List, Optional, Tuple

from .domain import QueryJob, QueryRequest
from .errors import MissingQueryError

QueryPair = Tuple[str, Optional[str]]


def resolve_query_jobs(query: Iterable[QueryPair] = (),
                       select: Iterable[QueryPair] = (),
                       construct: Iterable[QueryPair] = (),
                       verify: Iterable[str] = ()) -> List[QueryJob]:
    """
    Concatenate every query input into one ordered job list.

    Order is query pairs, select pairs, construct pairs, then verify queries.
    Duplicates are kept; each produces its own output.

    Raises:
        MissingQueryError: If no query was given at all
    """
    sources: List[QueryPair] = []
    for pairs in (query, select, construct):
        sources.extend((source, output) for source, output in pairs)
    sources.extend((source, None) for source in verify)

    if not sources:
        raise MissingQueryError()

    jobs = []
    for position, (source, output) in enumerate(sources, start=1):
        jobs.append(QueryJob.from_source(source, output, label=f"query_{position}"))
    return jobs


def jobs_from_request(request: QueryRequest) -> List[QueryJob]:
    """Resolve the query inputs of a request."""
    return resolve_query_jobs(
        query=request.query,
        select=request.select,
        construct=request.construct,
        verify=request.verify
    )
