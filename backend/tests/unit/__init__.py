"""
Unit Tests

Pure calculations run without a database. Service tests run against a fresh
in-memory SQLite database per test (aiosqlite), so no services are needed.
"""
