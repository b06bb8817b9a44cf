"""
Unit test for the ontology domain model.

HOW TO RUN:
The virtual environment .venv should be activated before running the tests.

From the src directory, run:
    python -m ontology.test_domain

Or from the project root:
    cd src; python -m ontology.test_domain
"""

from rdflib import Graph, Literal, Namespace, RDF, RDFS, OWL

from .domain import Ontology

EX = Namespace("http://example.org/")


def test_ontology_defaults():
    """Test a freshly created ontology."""
    print("Testing Ontology defaults...")

    ontology = Ontology(iri=EX.main)

    assert len(ontology) == 0
    assert ontology.imports == []
    assert ontology.imported == {}
    assert ontology.source is None

    print("✓ Ontology defaults working correctly")


def test_add_import():
    """Test declaring imports with and without a resolution."""
    print("Testing add_import...")

    base = Ontology(iri=EX.base)
    ontology = Ontology(iri=EX.main)

    ontology.add_import(EX.base, base)
    ontology.add_import(EX.other)
    ontology.add_import(EX.base)

    assert ontology.imports == [EX.base, EX.other]
    assert ontology.get_imported(EX.base) is base
    assert ontology.get_imported(str(EX.base)) is base
    assert ontology.get_imported(EX.other) is None

    print("✓ add_import working correctly")


def test_copy_imports_to():
    """Test copying import declarations onto another ontology."""
    print("Testing copy_imports_to...")

    base = Ontology(iri=EX.base)
    source = Ontology(iri=EX.main)
    source.add_import(EX.base, base)
    source.add_import(EX.other)

    target = Ontology(iri=EX.main)
    source.copy_imports_to(target)

    assert target.imports == source.imports
    assert target.imports is not source.imports
    assert target.get_imported(EX.base) is base
    assert EX.other not in target.imported

    print("✓ copy_imports_to working correctly")


def test_iter_import_closure():
    """Test walking the import closure breadth first, once per IRI."""
    print("Testing iter_import_closure...")

    shared = Ontology(iri=EX.shared)
    base = Ontology(iri=EX.base)
    main = Ontology(iri=EX.main)
    base.add_import(EX.shared, shared)
    base.add_import(EX.main, main)
    base.add_import(EX.lost)
    main.add_import(EX.base, base)
    main.add_import(EX.missing)

    visited = [(iri, resolved, importer.iri) for iri, resolved, importer in main.iter_import_closure()]

    assert visited == [
        (EX.base, base, EX.main),
        (EX.missing, None, EX.main),
        (EX.shared, shared, EX.base),
        (EX.lost, None, EX.base),
    ]
    assert list(Ontology(iri=EX.alone).iter_import_closure()) == []

    print("✓ iter_import_closure working correctly")


def test_to_rdf_graph():
    """Test the serializable graph has header, imports and axioms."""
    print("Testing to_rdf_graph...")

    ontology = Ontology(iri=EX.main, axioms=Graph())
    ontology.axioms.bind("ex", EX)
    ontology.axioms.add((EX.A, RDF.type, OWL.Class))
    ontology.axioms.add((EX.A, RDFS.label, Literal("A")))
    ontology.add_import(EX.base)

    graph = ontology.to_rdf_graph()

    assert len(graph) == 4
    assert (EX.main, RDF.type, OWL.Ontology) in graph
    assert (EX.main, OWL.imports, EX.base) in graph
    assert len(ontology.axioms) == 2
    assert str(dict(graph.namespaces())["ex"]) == str(EX)

    anonymous = Ontology(iri=None, axioms=Graph())
    anonymous.axioms.add((EX.A, RDF.type, OWL.Class))
    assert len(anonymous.to_rdf_graph()) == 1

    print("✓ to_rdf_graph working correctly")


def run_all_tests():
    """Run all test functions."""
    print("=" * 50)
    print("Running Ontology Domain Tests")
    print("=" * 50)

    test_functions = [
        test_ontology_defaults,
        test_add_import,
        test_copy_imports_to,
        test_iter_import_closure,
        test_to_rdf_graph,
    ]

    passed = 0
    failed = 0

    for test_func in test_functions:
        try:
            test_func()
            passed += 1
        except Exception as e:
            print(f"✗ {test_func.__name__} FAILED: {e}")
            failed += 1

    print("=" * 50)
    print(f"Test Results: {passed} passed, {failed} failed")
    print("=" * 50)

    return failed == 0


def main():
    """Main function to run the tests."""
    success = run_all_tests()
    if success:
        print("All tests passed!")
        return 0
    else:
        print("Some tests failed!")
        return 1


if __name__ == "__main__":
    exit(main())
