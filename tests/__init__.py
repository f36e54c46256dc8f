"""
Tests Package - Unit Tests

Test structure:
- tests/conftest.py - shared fixtures (settings factory, mocked API, recording sleep)
- tests/test_*.py - one module per harvester component

The HTTP API is replaced with httpx.MockTransport; no network access is needed.
"""
