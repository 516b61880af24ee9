"""
Study Pace Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures: in-memory database, clock, seed rows
    ├── unit/                # Pure functions and services against SQLite
    └── integration/         # HTTP API through httpx.ASGITransport

Running Tests:
    # Run all tests
    pytest backend/tests -v

    # Run only unit tests
    pytest backend/tests/unit -v

    # Run with coverage
    pytest backend/tests --cov=studypace --cov-report=html
"""
