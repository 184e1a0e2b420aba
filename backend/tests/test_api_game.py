import time

from fastapi.testclient import TestClient

from spinwheel.core.rate_limit import limiter
from spinwheel.main import create_app


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_get_default_config(client):
    body = client.get("/api/config").json()
    assert body["mode"] == 1
    assert body["current_page"] == "lottery1"
    assert len(body["mode1_options"]) == 12
    assert abs(sum(o["probability"] for o in body["mode1_options"]) - 100) <= 0.01


def test_spin_returns_result_and_config(client):
    response = client.post("/api/spin")
    assert response.status_code == 200
    body = response.json()
    assert body["config"]["remaining_spins"] == 99
    assert 0 <= body["result"]["index"] <= 11

    history = client.get("/api/history").json()
    assert [r["prize"] for r in history["results"]] == [body["result"]["prize"]]


def test_second_spin_during_animation_is_rejected(client):
    assert client.post("/api/spin").status_code == 200
    response = client.post("/api/spin")
    assert response.status_code == 400
    assert response.json()["detail"] == "Spin already in progress"


def test_spin_without_remaining_spins(client):
    assert client.post("/api/config", json={"remaining_spins": 0}).status_code == 200

    response = client.post("/api/spin")
    assert response.status_code == 400
    assert response.json()["detail"] == "No spins remaining"
    assert client.get("/api/history").json()["results"] == []


def test_mutations_locked_while_spinning_then_allowed(client):
    assert client.post("/api/spin").status_code == 200

    locked = [
        client.post("/api/config", json={"current_player": 2}),
        client.post("/api/reset"),
        client.post("/api/switch-page", json={"page": "advertisement"}),
    ]
    for response in locked:
        assert response.status_code == 423
        body = response.json()
        assert body["spinning"] is True
        assert body["spin_time"] >= 0

    status = client.get("/api/spin/status").json()
    assert status["is_spinning"] is True

    time.sleep(0.6)

    assert client.get("/api/spin/status").json() == {"is_spinning": False, "spin_time": 0.0}
    assert client.post("/api/config", json={"current_player": 2}).status_code == 200
    assert client.post("/api/switch-page", json={"page": "advertisement"}).status_code == 200
    assert client.post("/api/reset").status_code == 200


def test_partial_config_update(client):
    response = client.post(
        "/api/config",
        json={"mode": 2, "mode2_win_rate": 12.5, "mode2_win_text": "免单!"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == 2
    assert body["mode2_win_rate"] == 12.5
    assert body["mode2_win_text"] == "免单!"
    assert body["remaining_spins"] == 100

    assert client.get("/api/config").json()["mode2_win_text"] == "免单!"


def test_config_update_replaces_options(client):
    options = [{"text": f"菜品{i}", "probability": 10 if i < 10 else 0} for i in range(12)]
    response = client.post("/api/config", json={"mode1_options": options})
    assert response.status_code == 200
    assert client.get("/api/config").json()["mode1_options"][0]["text"] == "菜品0"


def test_invalid_config_rejected(client):
    response = client.post("/api/config", json={"mode": 3})
    assert response.status_code == 400
    assert "invalid mode" in response.json()["detail"]

    bad_options = [{"text": "x", "probability": 5} for _ in range(12)]
    response = client.post("/api/config", json={"mode1_options": bad_options})
    assert response.status_code == 400
    assert "total probability" in response.json()["detail"]

    response = client.post("/api/config", json={"remaining_spins": "many"})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid request")

    assert client.get("/api/config").json()["mode"] == 1


def test_switch_page_syncs_mode(client):
    response = client.post("/api/switch-page", json={"page": "lottery2"})
    assert response.status_code == 200
    assert response.json()["page"] == "lottery2"

    config = client.get("/api/config").json()
    assert config["current_page"] == "lottery2"
    assert config["mode"] == 2

    client.post("/api/switch-page", json={"page": "advertisement"})
    config = client.get("/api/config").json()
    assert config["current_page"] == "advertisement"
    assert config["mode"] == 2


def test_switch_page_rejects_unknown_page(client):
    response = client.post("/api/switch-page", json={"page": "kitchen"})
    assert response.status_code == 400


def test_reset(client):
    client.post("/api/config", json={"current_player": 4, "remaining_spins": 2})
    client.post("/api/spin")
    time.sleep(0.5)

    response = client.post("/api/reset")
    assert response.status_code == 200
    config = response.json()["config"]
    assert (config["current_player"], config["remaining_spins"], config["total_spins"]) == (1, 100, 0)
    assert client.get("/api/history").json()["results"] == []


def test_spin_rate_limit_follows_app_settings(app_settings):
    config = app_settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "SPIN_RATE_LIMIT": "2/minute"})
    limiter.reset()
    try:
        with TestClient(create_app(config)) as client:
            assert client.post("/api/spin").status_code == 200
            assert client.post("/api/spin").status_code == 400
            response = client.post("/api/spin")
            assert response.status_code == 429
            assert "请求过于频繁" in response.json()["detail"]
    finally:
        limiter.reset()
