from lifetracker import config


def test_root_and_version(client):
    assert client.get("/").json() == {"message": "Life tracker backend running"}
    assert client.get("/api/version").json() == {"version": config.APP_VERSION}


def test_debug_requires_session(client):
    resp = client.get("/api/debug")
    assert resp.status_code == 401


def test_debug_reports_counts_without_secrets(alice):
    board = alice.post("/api/boards", json={"name": "Home"}).json()["board"]
    alice.post("/api/tasks", json={"boardId": board["id"], "title": "One"})

    info = alice.get("/api/debug").json()
    assert info["environment"] == config.APP_ENV
    assert isinstance(info["hasJWTSecret"], bool)
    assert info["database"]["connected"] is True
    assert info["database"]["userCount"] == 1
    assert info["database"]["boardCount"] == 1
    assert info["database"]["taskCount"] == 1
    assert "board" in info["database"]["collections"]
    assert config.JWT_SECRET not in str(info)
