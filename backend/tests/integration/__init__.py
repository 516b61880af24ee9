"""
Integration Tests

Drive the FastAPI app over HTTP (httpx.ASGITransport) with get_db pointed at
the per-test in-memory database.
"""
