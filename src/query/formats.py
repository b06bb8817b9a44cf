"""
Output format registry and format resolution for query results.

Each output format pairs a name and file extension with a writer for
tabular results (SELECT / ASK) and/or a writer for graph results
(CONSTRUCT / DESCRIBE). New formats are added by registering them; the
dispatcher only asks the registry for the writer matching a result kind.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Tuple

from .domain import QueryJob, QueryOutcome, ResultKind
from .errors import UnknownFormatError

DEFAULT_TABLE_FORMAT = "csv"
DEFAULT_GRAPH_FORMAT = "ttl"

_IRI = re.compile(r"<[^<>\s]*>")
_COMMENT = re.compile(r"#[^\n]*")
_PROLOGUE = re.compile(r"\b(PREFIX\s+[^\s:]*:\s*<>|BASE\s*<>)", re.IGNORECASE)
_QUERY_FORM = re.compile(r"\b(SELECT|CONSTRUCT|DESCRIBE|ASK)\b", re.IGNORECASE)


class ResultWriter(ABC):
    """Abstract base class for result writers."""

    @abstractmethod
    def write(self, outcome: QueryOutcome, sink: BinaryIO) -> None:
        """
        Serialize a query outcome.

        Args:
            outcome: Tagged evaluator result
            sink: Binary stream receiving the serialized bytes
        """
        pass


class TableWriter(ResultWriter):
    """Writes SELECT results through an rdflib result serializer; ASK answers as a one-cell table."""

    def __init__(self, serializer: str):
        self.serializer = serializer

    def write(self, outcome: QueryOutcome, sink: BinaryIO) -> None:
        if outcome.kind == ResultKind.BOOLEAN:
            answer = "true" if outcome.ask_answer else "false"
            sink.write(f"_askResult\n{answer}\n".encode("utf-8"))
            return
        sink.write(outcome.result.serialize(format=self.serializer))


class TsvWriter(ResultWriter):
    """SPARQL 1.1 TSV: ?-prefixed header, terms in N-Triples form."""

    def write(self, outcome: QueryOutcome, sink: BinaryIO) -> None:
        if outcome.kind == ResultKind.BOOLEAN:
            answer = "true" if outcome.ask_answer else "false"
            sink.write(f"?_askResult\n{answer}\n".encode("utf-8"))
            return
        variables = list(outcome.result.vars or [])
        lines = ["\t".join(f"?{var}" for var in variables)]
        for row in outcome.result:
            values = []
            for var in variables:
                term = row[var]
                values.append(term.n3() if term is not None else "")
            lines.append("\t".join(values))
        sink.write(("\n".join(lines) + "\n").encode("utf-8"))


class SparqlResultsWriter(ResultWriter):
    """SPARQL results documents (JSON or XML) for both SELECT and ASK."""

    def __init__(self, serializer: str):
        self.serializer = serializer

    def write(self, outcome: QueryOutcome, sink: BinaryIO) -> None:
        sink.write(outcome.result.serialize(format=self.serializer))


class GraphWriter(ResultWriter):
    """Writes CONSTRUCT / DESCRIBE graphs through an rdflib graph serializer."""

    def __init__(self, serializer: str):
        self.serializer = serializer

    def write(self, outcome: QueryOutcome, sink: BinaryIO) -> None:
        sink.write(outcome.graph.serialize(format=self.serializer, encoding="utf-8"))


@dataclass
class OutputFormat:
    """A named output format and the writers it offers."""
    name: str
    extension: str
    table_writer: Optional[ResultWriter] = None
    graph_writer: Optional[ResultWriter] = None
    description: str = ""

    def supports(self, kind: ResultKind) -> bool:
        if kind == ResultKind.GRAPH:
            return self.graph_writer is not None
        return self.table_writer is not None

    def writer_for(self, kind: ResultKind) -> ResultWriter:
        """Return the writer for a result kind, or raise UnknownFormatError."""
        writer = self.graph_writer if kind == ResultKind.GRAPH else self.table_writer
        if writer is None:
            raise UnknownFormatError(f"Format '{self.name}' cannot write {kind.value} results")
        return writer


class FormatRegistry:
    """Registry of available output formats."""

    def __init__(self):
        self._formats: Dict[str, OutputFormat] = {}
        self._register_default_formats()

    def _register_default_formats(self):
        """Register the built-in formats."""
        self.register_format(OutputFormat("csv", "csv", table_writer=TableWriter("csv"),
                                          description="Comma-separated values"))
        self.register_format(OutputFormat("tsv", "tsv", table_writer=TsvWriter(),
                                          description="Tab-separated values"))
        self.register_format(OutputFormat("txt", "txt", table_writer=TableWriter("txt"),
                                          description="Plain text table"))
        self.register_format(OutputFormat("json", "json", table_writer=SparqlResultsWriter("json"),
                                          graph_writer=GraphWriter("json-ld"),
                                          description="SPARQL JSON results or JSON-LD"))
        self.register_format(OutputFormat("xml", "xml", table_writer=SparqlResultsWriter("xml"),
                                          graph_writer=GraphWriter("xml"),
                                          description="SPARQL XML results or RDF/XML"))
        self.register_format(OutputFormat("ttl", "ttl", graph_writer=GraphWriter("turtle"),
                                          description="Turtle"))
        self.register_format(OutputFormat("turtle", "ttl", graph_writer=GraphWriter("turtle"),
                                          description="Turtle"))
        self.register_format(OutputFormat("jsonld", "jsonld", graph_writer=GraphWriter("json-ld"),
                                          description="JSON-LD"))
        self.register_format(OutputFormat("nt", "nt", graph_writer=GraphWriter("nt"),
                                          description="N-Triples"))
        self.register_format(OutputFormat("n3", "n3", graph_writer=GraphWriter("n3"),
                                          description="Notation3"))
        self.register_format(OutputFormat("owl", "owl", graph_writer=GraphWriter("xml"),
                                          description="RDF/XML"))

    def register_format(self, output_format: OutputFormat) -> None:
        """Register a format, replacing any format with the same name."""
        self._formats[output_format.name.lower()] = output_format

    def get_format(self, name: str) -> OutputFormat:
        """
        Look up a format by name (case-insensitive, leading dot ignored).

        Raises:
            UnknownFormatError: If no such format is registered
        """
        key = (name or "").strip().lstrip(".").lower()
        if key not in self._formats:
            raise UnknownFormatError(
                f"Unknown format '{name}'; available formats: {', '.join(self.get_available_formats())}"
            )
        return self._formats[key]

    def has_format(self, name: str) -> bool:
        return (name or "").strip().lstrip(".").lower() in self._formats

    def get_available_formats(self) -> List[str]:
        return sorted(self._formats.keys())

    def default_format_name(self, query_text: str) -> str:
        """Default format for a query: a triples format for CONSTRUCT/DESCRIBE, a table otherwise."""
        query_form = detect_query_form(query_text)
        if query_form in ("CONSTRUCT", "DESCRIBE"):
            return DEFAULT_GRAPH_FORMAT
        return DEFAULT_TABLE_FORMAT


def detect_query_form(query_text: str) -> Optional[str]:
    """
    Guess the query form from the text without parsing it.

    IRIs, comments and the prologue are stripped before looking for the
    first SELECT, CONSTRUCT, DESCRIBE or ASK keyword.
    """
    text = _IRI.sub("<>", query_text)
    text = _COMMENT.sub("", text)
    text = _PROLOGUE.sub("", text)
    match = _QUERY_FORM.search(text)
    return match.group(1).upper() if match else None


def resolve_format(job: QueryJob, explicit_format: Optional[str] = None,
                   output_dir: str = "",
                   registry: Optional[FormatRegistry] = None) -> Tuple[str, Path]:
    """
    Decide the format name and output path for a query job.

    Priority: explicit format, then the output path extension, then the
    query form. Without an output path one is derived from the query's
    base name and the format extension, inside output_dir.

    Raises:
        MissingFileError: If the job's query file does not exist
        UnknownFormatError: If the resolved format is not registered
    """
    registry = registry or FormatRegistry()
    job.check_source()

    format_name = explicit_format
    if not format_name and job.output_path:
        format_name = Path(job.output_path).suffix.lstrip(".")
    if not format_name:
        format_name = registry.default_format_name(job.read_query())

    output_format = registry.get_format(format_name)

    if job.output_path:
        output_path = Path(job.output_path)
    else:
        output_path = Path(output_dir) / f"{job.base_name}.{output_format.extension}"
    return output_format.name, output_path
