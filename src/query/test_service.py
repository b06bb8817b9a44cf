"""
Integration test for the query service.

Runs whole requests (queries or updates) against ontologies loaded from
Turtle files written to a temporary directory.
"""

import shutil
import tempfile
from pathlib import Path

import pytest
from rdflib import Graph, Namespace, RDF, OWL

from ontology.store import OntologyStore
from .domain import QueryRequest
from .errors import GraphConstructionError, MissingFileError, MissingQueryError, UnknownFormatError
from .service import QueryService

EX = Namespace("http://example.org/")

BASE_TTL = """@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .

<http://example.org/base.ttl> a owl:Ontology .
<http://example.org/A> a owl:Class .
<http://example.org/B> a owl:Class ; rdfs:subClassOf <http://example.org/A> .
"""

MAIN_TTL = """@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .

<http://example.org/main> a owl:Ontology ;
    owl:imports <http://example.org/base.ttl> .
<http://example.org/C> a owl:Class ; rdfs:subClassOf <http://example.org/B> .
"""

CLASSES_QUERY = """PREFIX owl: <http://www.w3.org/2002/07/owl#>
SELECT ?c WHERE { ?c a owl:Class } ORDER BY ?c
"""

GRAPHS_QUERY = """SELECT DISTINCT ?g WHERE { GRAPH ?g { ?s ?p ?o } } ORDER BY ?g
"""

RENAME_UPDATE = """PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
INSERT DATA { <http://example.org/C> rdfs:label "C" }
"""


@pytest.fixture
def workspace():
    """Temporary directory with an ontology, its import, queries and an update."""
    temp_path = Path(tempfile.mkdtemp())
    (temp_path / "base.ttl").write_text(BASE_TTL, encoding="utf-8")
    (temp_path / "main.ttl").write_text(MAIN_TTL, encoding="utf-8")
    (temp_path / "classes.rq").write_text(CLASSES_QUERY, encoding="utf-8")
    (temp_path / "graphs.rq").write_text(GRAPHS_QUERY, encoding="utf-8")
    (temp_path / "label.ru").write_text(RENAME_UPDATE, encoding="utf-8")
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def ontology(workspace):
    store = OntologyStore(resolve_remote=False)
    return store.load_file(workspace / "main.ttl")


class TestQueryMode:
    """Test cases for running queries."""

    def test_query_with_explicit_output(self, workspace, ontology):
        request = QueryRequest(query=[(str(workspace / "classes.rq"), str(workspace / "classes.csv"))])

        result = QueryService().execute(ontology, request)

        assert not result.is_update
        assert result.outputs == [workspace / "classes.csv"]
        lines = (workspace / "classes.csv").read_text(encoding="utf-8").splitlines()
        assert lines == ["c", "http://example.org/A", "http://example.org/B", "http://example.org/C"]

    def test_verify_queries_use_output_dir(self, workspace, ontology):
        output_dir = workspace / "results"
        output_dir.mkdir()
        request = QueryRequest(
            verify=[str(workspace / "classes.rq")],
            output_dir=str(output_dir),
            format="json"
        )

        result = QueryService().execute(ontology, request)

        assert result.outputs == [output_dir / "classes.json"]
        assert (output_dir / "classes.json").exists()

    def test_named_graphs(self, workspace, ontology):
        request = QueryRequest(
            query=[(str(workspace / "graphs.rq"), str(workspace / "graphs.tsv"))],
            use_graphs=True
        )

        QueryService().execute(ontology, request)

        lines = (workspace / "graphs.tsv").read_text(encoding="utf-8").splitlines()
        assert lines == ["?g", "<http://example.org/base.ttl>"]

    def test_legacy_select_alias(self, workspace, ontology):
        request = QueryRequest(select=[(str(workspace / "classes.rq"), str(workspace / "legacy.txt"))])

        result = QueryService().execute(ontology, request)

        assert result.outputs == [workspace / "legacy.txt"]
        assert "http://example.org/A" in (workspace / "legacy.txt").read_text(encoding="utf-8")

    def test_unresolved_import(self, workspace):
        (workspace / "main.ttl").write_text(
            MAIN_TTL.replace("http://example.org/base.ttl", "http://example.org/missing.ttl"),
            encoding="utf-8"
        )
        ontology = OntologyStore(resolve_remote=False).load_file(workspace / "main.ttl")
        request = QueryRequest(verify=[str(workspace / "classes.rq")], output_dir=str(workspace))

        with pytest.raises(GraphConstructionError):
            QueryService().execute(ontology, request)

        ignore = QueryRequest(verify=[str(workspace / "classes.rq")], output_dir=str(workspace),
                              include_imports=False)
        result = QueryService().execute(ontology, ignore)
        lines = result.outputs[0].read_text(encoding="utf-8").splitlines()
        assert lines == ["c", "http://example.org/C"]

    def test_unknown_format(self, workspace, ontology):
        request = QueryRequest(verify=[str(workspace / "classes.rq")], format="docx")

        with pytest.raises(UnknownFormatError):
            QueryService().execute(ontology, request)

    def test_no_queries_and_no_updates(self, ontology):
        with pytest.raises(MissingQueryError):
            QueryService().execute(ontology, QueryRequest())


class TestUpdateMode:
    """Test cases for running updates."""

    def test_update_returns_new_ontology(self, workspace, ontology):
        request = QueryRequest(updates=[str(workspace / "label.ru")])

        result = QueryService().execute(ontology, request)

        assert result.is_update
        assert result.outputs == []
        updated = result.ontology
        assert updated is not ontology
        assert updated.imports == [EX["base.ttl"]]
        assert (EX.C, RDF.type, OWL.Class) in updated.axioms
        assert (EX.A, RDF.type, OWL.Class) in updated.axioms
        assert len(ontology.axioms) < len(updated.axioms)

    def test_updates_take_precedence_over_queries(self, workspace, ontology):
        request = QueryRequest(
            updates=[str(workspace / "label.ru")],
            query=[(str(workspace / "classes.rq"), str(workspace / "classes.csv"))]
        )

        result = QueryService().execute(ontology, request)

        assert result.is_update
        assert not (workspace / "classes.csv").exists()

    def test_missing_update_file_fails_before_graph(self, workspace, ontology, monkeypatch):
        def fail_build_graph(*args, **kwargs):
            raise AssertionError("graph must not be built")

        monkeypatch.setattr("query.update.build_graph", fail_build_graph)
        request = QueryRequest(updates=[str(workspace / "label.ru"), str(workspace / "missing.ru")])

        with pytest.raises(MissingFileError, match="missing.ru"):
            QueryService().execute(ontology, request)

    def test_run_updates_requires_paths(self, ontology):
        with pytest.raises(MissingQueryError):
            QueryService().run_updates(ontology, [])

    def test_updated_ontology_can_be_saved(self, workspace, ontology):
        store = OntologyStore(resolve_remote=False)
        updated = QueryService().run_updates(ontology, [str(workspace / "label.ru")])

        store.save(updated, workspace / "updated.ttl")

        saved = Graph().parse(workspace / "updated.ttl", format="turtle")
        assert (EX.main, OWL.imports, EX["base.ttl"]) in saved


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
