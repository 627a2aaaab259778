"""API tests package.

Tests for the HTTP routes and the require_admission() dependency using
TestClient. The container is mocked so that the presentation layer is
tested in isolation; integration tests cover the full stack.
"""
