"""
Query domain models for defining query and update work.

This module contains the data structures for query jobs, update jobs,
the dataset a query runs against and the tagged result of an evaluation.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator
from rdflib import Dataset, Graph, URIRef
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.query import Result

from ontology.domain import Ontology

from .errors import ImportsOptionError, MissingFileError

DEFAULT_GRAPH = DATASET_DEFAULT_GRAPH_ID

# Start of a SPARQL request: prologue or query form followed by whitespace
QUERY_TEXT_PATTERN = re.compile(
    r"^\s*(PREFIX|BASE|SELECT|CONSTRUCT|DESCRIBE|ASK)\s", re.IGNORECASE
)


class ImportsMode(str, Enum):
    """How imported ontologies are exposed to queries."""
    UNION = "union"    # merge the import closure into the default graph
    GRAPHS = "graphs"  # one named graph per import
    IGNORE = "ignore"  # only the input ontology's own axioms

    @classmethod
    def parse(cls, value: str) -> "ImportsMode":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ImportsOptionError(value) from None


class ResultKind(str, Enum):
    """Shape of an evaluated query result."""
    TABLE = "table"      # SELECT variable bindings
    BOOLEAN = "boolean"  # ASK answer
    GRAPH = "graph"      # CONSTRUCT / DESCRIBE triples


def looks_like_query_text(source: str) -> bool:
    """Heuristic: does this string hold SPARQL text rather than a file path?"""
    return "{" in source or "\n" in source or bool(QUERY_TEXT_PATTERN.match(source))


def is_existing_file(source: str) -> bool:
    """True if the string names an existing file; query text never raises here."""
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        # name too long or containing NUL: not a path on this system
        return False


class QueryJob(BaseModel):
    """A single query to run and where its result goes."""

    query_path: Optional[str] = Field(None, description="Path of a file holding the query")
    query_text: Optional[str] = Field(None, description="Literal query text")
    output_path: Optional[str] = Field(None, description="Output file; derived from the query when missing")
    label: Optional[str] = Field(None, description="Name used for literal queries")

    @model_validator(mode="after")
    def check_single_source(self) -> "QueryJob":
        if (self.query_path is None) == (self.query_text is None):
            raise ValueError("A query job needs exactly one of query_path or query_text")
        return self

    @classmethod
    def from_source(cls, source: str, output_path: Optional[str] = None,
                    label: Optional[str] = None) -> "QueryJob":
        """Create a job from a string that is either a path or query text.

        An existing file is always a path, whatever its name looks like.
        """
        if not is_existing_file(source) and looks_like_query_text(source):
            return cls(query_text=source, output_path=output_path, label=label)
        return cls(query_path=source, output_path=output_path)

    @property
    def base_name(self) -> str:
        """Name used when an output file has to be synthesized."""
        if self.query_path is not None:
            return Path(self.query_path).stem
        return self.label or "query"

    @property
    def source_name(self) -> str:
        return self.query_path if self.query_path is not None else self.base_name

    def check_source(self) -> None:
        """Raise MissingFileError when the query file does not exist."""
        if self.query_path is not None and not Path(self.query_path).is_file():
            raise MissingFileError(self.query_path)

    def read_query(self) -> str:
        """Return the query text, reading the file when needed."""
        if self.query_text is not None:
            return self.query_text
        self.check_source()
        return Path(self.query_path).read_text(encoding="utf-8")


class UpdateJob(BaseModel):
    """A SPARQL UPDATE request with a label for logging."""

    label: str = Field(..., description="Identifying label, usually the file path")
    text: str = Field(..., description="Update text")

    @classmethod
    def from_file(cls, path: str) -> "UpdateJob":
        update_path = Path(path)
        if not update_path.is_file():
            raise MissingFileError(path)
        return cls(label=str(update_path), text=update_path.read_text(encoding="utf-8"))


class QueryRequest(BaseModel):
    """Everything one invocation asks for: queries or updates plus options."""

    format: Optional[str] = Field(default=None, description="Explicit result format name")
    output_dir: str = Field(default="", description="Directory for synthesized outputs (empty means cwd)")
    use_graphs: bool = Field(default=False, description="Load imports as named graphs")
    include_imports: bool = Field(default=True, description="Include the import closure at all")

    query: List[Tuple[str, Optional[str]]] = Field(default_factory=list, description="(query, output) pairs")
    select: List[Tuple[str, Optional[str]]] = Field(default_factory=list, description="Deprecated SELECT pairs")
    construct: List[Tuple[str, Optional[str]]] = Field(default_factory=list, description="Deprecated CONSTRUCT pairs")
    verify: List[str] = Field(default_factory=list, description="Queries whose outputs are derived")
    updates: List[str] = Field(default_factory=list, description="Update file paths, applied in order")

    @classmethod
    def with_imports_mode(cls, mode: ImportsMode, **kwargs) -> "QueryRequest":
        """Create a request from an imports mode instead of the two flags."""
        return cls(
            use_graphs=mode == ImportsMode.GRAPHS,
            include_imports=mode != ImportsMode.IGNORE,
            **kwargs
        )

    @property
    def is_update(self) -> bool:
        return len(self.updates) > 0


@dataclass
class QueryDataset:
    """Named graphs a query runs against; DEFAULT_GRAPH is always present."""

    graphs: Dict[URIRef, Graph] = field(default_factory=dict)
    _rdf_dataset: Optional[Dataset] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if DEFAULT_GRAPH not in self.graphs:
            self.graphs[DEFAULT_GRAPH] = Graph()

    @property
    def default_graph(self) -> Graph:
        return self.graphs[DEFAULT_GRAPH]

    @property
    def named_graphs(self) -> Dict[URIRef, Graph]:
        """Graphs other than the default one."""
        return {name: graph for name, graph in self.graphs.items() if name != DEFAULT_GRAPH}

    @property
    def rdf_dataset(self) -> Dataset:
        """rdflib Dataset view used for evaluation, built once."""
        if self._rdf_dataset is None:
            dataset = Dataset()
            for prefix, namespace in self.default_graph.namespaces():
                dataset.bind(prefix, namespace, override=False)
            for name, graph in self.graphs.items():
                # DEFAULT_GRAPH names the dataset's default graph
                target = dataset.graph(name)
                for triple in graph:
                    target.add(triple)
            self._rdf_dataset = dataset
        return self._rdf_dataset

    def triple_count(self) -> int:
        return sum(len(graph) for graph in self.graphs.values())

    def __len__(self) -> int:
        """Number of graphs, default included."""
        return len(self.graphs)


@dataclass
class QueryOutcome:
    """Evaluator result tagged with its kind, inspected once by the dispatcher."""

    kind: ResultKind
    result: Result

    @classmethod
    def from_result(cls, result: Result) -> "QueryOutcome":
        if result.type == "SELECT":
            return cls(ResultKind.TABLE, result)
        if result.type == "ASK":
            return cls(ResultKind.BOOLEAN, result)
        if result.type in ("CONSTRUCT", "DESCRIBE"):
            return cls(ResultKind.GRAPH, result)
        raise ValueError(f"Unsupported result type: {result.type}")

    @property
    def graph(self) -> Graph:
        return self.result.graph

    @property
    def ask_answer(self) -> bool:
        return bool(self.result.askAnswer)


@dataclass
class ExecutionResult:
    """What one QueryService invocation produced."""

    outputs: List[Path] = field(default_factory=list)   # result files, query mode
    ontology: Optional[Ontology] = None                  # new ontology, update mode

    @property
    def is_update(self) -> bool:
        return self.ontology is not None
