"""
Exceptions raised by the query module.

Usage errors also derive from ValueError so command-line scripts can report
them as invalid input. Evaluator failures are chained to the original
rdflib exception.
"""


class OntologyQueryError(Exception):
    """Base class for all query and update errors."""


class MissingQueryError(OntologyQueryError, ValueError):
    """No query and no update was specified."""

    def __init__(self, message: str = "At least one query must be provided"):
        super().__init__(message)


class MissingFileError(OntologyQueryError, ValueError):
    """A query or update file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File '{path}' does not exist")


class UnknownFormatError(OntologyQueryError, ValueError):
    """A format name is not registered or cannot write the given result kind."""


class ImportsOptionError(OntologyQueryError, ValueError):
    """The imports handling option is not one of the supported values."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid imports option '{value}': must be union, graphs, or ignore")


class GraphConstructionError(OntologyQueryError):
    """The dataset could not be built, usually because an import is unresolved."""


class QueryExecutionError(OntologyQueryError):
    """A query could not be parsed or evaluated."""


class UpdateExecutionError(QueryExecutionError):
    """An update could not be parsed or applied."""
