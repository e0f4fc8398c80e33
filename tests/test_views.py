from conftest import FakeFetcher

from devduel.errors import NotFoundError


def test_index(client):
    response = client.get('/')

    assert response.status_code == 200
    assert b'DevDuel' in response.data


def test_post_analysis(client):
    response = client.post('/api/analyze', json={"username": "alice", "persona": "founder"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["total_score"] == 73
    assert body["profile"]["user"]["login"] == "alice"


def test_get_analysis_defaults_to_recruiter(client):
    response = client.get('/api/analyze/alice')

    assert response.status_code == 200
    assert response.get_json()["data"]["recruiter_verdict"] == "Interview"


def test_analysis_requires_a_json_body(client):
    response = client.post('/api/analyze', data="username=alice")

    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_input"


def test_invalid_username_is_a_bad_request(client):
    response = client.post('/api/analyze', json={"username": "not a user"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Please enter a valid GitHub username or profile URL."


def test_unknown_user_is_not_found(client, fetcher):
    fetcher.errors["ghost"] = NotFoundError("404", handle="ghost")

    response = client.get('/api/analyze/ghost')

    assert response.status_code == 404
    assert "ghost" in response.get_json()["error"]


def test_rate_limit_maps_to_429(app, client):
    app.extensions['analysis_pipeline'].rate_limiter.max_requests = 1
    client.get('/api/analyze/alice')

    response = client.get('/api/analyze/alice')

    assert response.status_code == 429
    assert response.get_json()["code"] == "rate_limited"


def test_clients_are_identified_by_forwarded_address(app, client):
    app.extensions['analysis_pipeline'].rate_limiter.max_requests = 1
    client.get('/api/analyze/alice', headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})

    response = client.get('/api/analyze/alice', headers={"X-Forwarded-For": "10.0.0.2"})

    assert response.status_code == 200


def test_battle_is_recorded_and_listed(client):
    response = client.post('/api/battle/compare', json={"player1": "alice", "player2": "bob"})

    assert response.status_code == 200
    assert response.get_json()["data"]["winner"] == "user1"

    recent = client.get('/api/battle/recent').get_json()
    assert [(b["user1"], b["user2"], b["winner"]) for b in recent["battles"]] == [("alice", "bob", "alice")]

    history = client.get('/api/battle/history/BOB').get_json()
    assert history["stats"] == {"total_battles": 1, "victories": 0, "win_rate": 0}
    assert len(history["battles"]) == 1


def test_self_battle_is_a_bad_request(client):
    response = client.post('/api/battle/compare', json={"player1": "alice", "player2": "ALICE"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "You can't battle yourself! Pick two different GitHub users."


def test_recent_limit_is_clamped(client):
    for opponent in ("bob", "carol"):
        client.post('/api/battle/compare', json={"player1": "alice", "player2": opponent})

    response = client.get('/api/battle/recent?limit=0')

    assert response.status_code == 200
    assert len(response.get_json()["battles"]) == 1


def test_history_rejects_invalid_username(client):
    response = client.get('/api/battle/history/-bad-')

    assert response.status_code == 400


def test_health(client):
    body = client.get('/api/battle/health').get_json()

    assert body["status"] == "healthy"
    assert body["service"] == "battle_arena"


def test_fetcher_fixture_is_shared_with_the_app(client, fetcher):
    assert isinstance(fetcher, FakeFetcher)
    client.get('/api/analyze/alice')

    assert fetcher.calls == [("full", "alice")]
