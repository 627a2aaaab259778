"""Test suite for the Gatekeeper admission layer.

Test structure follows the test pyramid:
- unit/: Unit tests - domain logic and adapters in isolation
- integration/: Integration tests - real SQLite database and fakeredis
- api/: API endpoint tests - HTTP routes with a mocked container

Settings come from environment defaults set in conftest.py.
"""
