"""Test package for the Doc Capture core.

This package contains unit tests for all components of the capture
system including search, storage, classification, processing and the
debounce guard.

Test Structure:
- conftest.py: Shared fixtures and test configuration
- test_search.py: Tests for word similarity, entry search and filters
- test_models.py: Tests for entry labels and capture results
- test_storage.py: Tests for the entry codec, blob storage and entry store
- test_store_owner.py: Tests for the single-writer store owner
- test_database.py: Tests for the scratch database
- test_classifiers.py: Tests for link detection and clipboard classification
- test_processors.py: Tests for OCR and capture workflows
- test_guards.py: Tests for the debounce guard
- test_extractors.py: Tests for OCR, PDF and link metadata adapters
- test_validators.py: Tests for file type validation
- test_app.py: Tests for application wiring
"""
