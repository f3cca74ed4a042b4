"""Tests for health endpoint."""


def test_health_returns_200(client):
    """Health endpoint returns 200 with the in-memory store."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_health_returns_expected_keys(client):
    """Health response contains expected structure."""
    r = client.get("/health")
    data = r.json()
    assert "status" in data
    assert "version" in data
    assert "checks" in data
    components = {check["component"] for check in data["checks"]}
    assert {"environment", "key_value_store", "supabase"} <= components
