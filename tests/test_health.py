from contentdesk.errors import StoreError


def test_health_reports_running(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["payload"] == "running"
    assert data["timestamp"].endswith("Z")


def test_health_does_not_touch_the_store(client, store, monkeypatch):
    def broken(*args, **kwargs):
        raise StoreError("database unavailable")

    monkeypatch.setattr(store, "find", broken)
    monkeypatch.setattr(store, "find_by_id", broken)

    assert client.get("/api/health").status_code == 200
