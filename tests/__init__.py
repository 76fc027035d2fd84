"""
palletforge test suite
======================

Test Modules
------------
- test_models.py: Configuration model validation and serialization
- test_naming.py: Case transforms
- test_expressions.py: Template dialect and expression evaluation
- test_renderer.py: Template rendering, bindings and whitespace control
- test_coordinator.py: File set generation and cross-file rules
- test_generator.py: Writing crates to disk
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_coordinator.py

    # Run specific test class
    pytest tests/test_coordinator.py::TestCrossFileConsistency
"""
