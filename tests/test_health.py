def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_db_ping(client):
    r = client.get("/db-ping")
    assert r.status_code == 200
    body = r.json()
    assert body["db"] == "ok"
    assert body["value"] == 1


def test_public_routes_are_registered(client):
    paths = client.get("/openapi.json").json()["paths"]
    for path in (
        "/members",
        "/attention",
        "/attention/dismiss",
        "/update/{token}",
        "/imports/progress",
        "/dashboard/analytics",
        "/assignments/available-members",
        "/admin/users",
    ):
        assert path in paths
