"""
Test suite for the user profile API.

Tests run against an in-memory SQLite database through an ASGI transport,
so no server or external store is needed.

Running Tests:
- All tests: pytest
- Admin-only endpoints: pytest -m admin
- Everything else: pytest -m "not admin"
"""
