"""
Testing API via TestClient
- The clock is pinned by the set_today fixture (conftest), starting on 2025-03-01,
  whose puzzle is 3 × 6 = 18 with tiles 1, 3, 6, 12, ×, ÷.
"""


def test_get_puzzle(client):
    response = client.get("/puzzle")
    assert response.status_code == 200
    body = response.json()
    assert body["day"] == "2025-03-01"
    assert body["target"] == 18
    assert body["alphabet"] == ["1", "3", "6", "12", "×", "÷"]
    assert body["status"] == "playing"
    assert body["attempts_left"] == 5
    assert body["max_hints"] == 2
    # Solution stays hidden while playing
    assert body["solution"] is None


def test_guess_and_win(client):
    """
    Flow:
    1) Wrong length -> 400.
    2) Tile not in today's set -> 400; not a tile at all -> 422.
    3) Valid wrong guess -> feedback.
    4) Winning guess -> 'won', solution revealed, streak 1.
    """
    response = client.post("/puzzle/guess", json={"tiles": ["3"]})
    assert response.status_code == 400

    response = client.post("/puzzle/guess", json={"tiles": ["7", "×", "3"]})
    assert response.status_code == 400

    response = client.post("/puzzle/guess", json={"tiles": ["3", "banana", "6"]})
    assert response.status_code == 422

    response = client.post("/puzzle/guess", json={"tiles": ["1", "×", "3"]})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "playing"
    assert body["attempts_left"] == 4
    assert body["feedback"]["value"] == 3
    assert body["feedback"]["feedback"] == ["absent", "hit", "present"]
    assert body["feedback"]["distance"] == 15
    assert body["feedback"]["closeness"] == "warmer"
    assert body["solution"] is None

    response = client.post("/puzzle/guess", json={"tiles": ["6", "*", "3"]})
    assert response.status_code == 200
    final = response.json()
    assert final["status"] == "won"
    assert final["feedback"]["feedback"] == ["present", "hit", "present"]
    assert final["feedback"]["closeness"] is None
    assert final["solution"] == ["3", "×", "6"]
    assert final["streak"] == 1


def test_cannot_guess_after_game_finished(client):
    response = client.post("/puzzle/guess", json={"tiles": ["3", "×", "6"]})
    assert response.json()["status"] == "won"

    response = client.post("/puzzle/guess", json={"tiles": ["3", "×", "6"]})
    assert response.status_code == 200
    second = response.json()
    assert second["status"] == "won"
    assert second["attempts_left"] == 4
    assert second["feedback"] is None
    assert "No more guesses" in second["note"]


def test_loss_resets_streak(client):
    for _ in range(5):
        response = client.post("/puzzle/guess", json={"tiles": ["12", "÷", "6"]})
        assert response.status_code == 200

    body = response.json()
    assert body["status"] == "lost"
    assert body["streak"] == 0
    assert body["solution"] == ["3", "×", "6"]


def test_hints(client):
    first = client.post("/puzzle/hint")
    assert first.status_code == 200
    assert first.json()["hints_used"] == 1

    second = client.post("/puzzle/hint")
    assert second.status_code == 200
    assert second.json()["position"] != first.json()["position"]

    third = client.post("/puzzle/hint")
    assert third.status_code == 409

    state = client.get("/puzzle").json()
    assert state["hints_used"] == 2
    assert len(state["hints"]) == 2
    assert state["attempts_left"] == 5


def test_draft_flow(client):
    assert client.put("/puzzle/draft/0", json={"tile": "6"}).status_code == 200
    assert client.put("/puzzle/draft/1", json={"tile": "×"}).status_code == 200
    response = client.put("/puzzle/draft/2", json={"tile": "12"})
    assert response.json()["draft"] == ["6", "×", "12", None, None]

    # Fix the last slot
    response = client.delete("/puzzle/draft/2")
    assert response.json()["draft"][2] is None
    client.put("/puzzle/draft/2", json={"tile": "3"})

    # Bad slot / tile not in today's set
    assert client.put("/puzzle/draft/9", json={"tile": "3"}).status_code == 400
    assert client.put("/puzzle/draft/3", json={"tile": "7"}).status_code == 400
    # Numbers go in even slots, operators in odd ones
    assert client.put("/puzzle/draft/3", json={"tile": "6"}).status_code == 400
    assert client.put("/puzzle/draft/4", json={"tile": "÷"}).status_code == 400

    response = client.post("/puzzle/draft/submit")
    assert response.status_code == 200
    assert response.json()["status"] == "won"

    # Game over: draft commands conflict
    assert client.delete("/puzzle/draft").status_code == 409


def test_reset_draft(client):
    client.put("/puzzle/draft/0", json={"tile": "6"})
    response = client.delete("/puzzle/draft")
    assert response.status_code == 200
    assert response.json()["draft"] == [None] * 5

    # Empty draft can't be submitted
    assert client.post("/puzzle/draft/submit").status_code == 400


def test_summary(client):
    client.post("/puzzle/guess", json={"tiles": ["1", "×", "3"]})
    client.post("/puzzle/guess", json={"tiles": ["3", "×", "6"]})
    response = client.get("/puzzle/summary")
    assert response.status_code == 200
    assert response.json() == {"guess_count": 2, "max_guesses": 5, "won": True, "streak": 1}


def test_next_day_rollover(client, set_today):
    client.post("/puzzle/guess", json={"tiles": ["3", "×", "6"]})

    set_today("2025-03-02")
    state = client.get("/puzzle").json()
    assert state["day"] == "2025-03-02"
    assert state["guesses"] == []
    assert state["status"] == "playing"
    assert state["streak"] == 1

    # Skipping a day loses the streak
    set_today("2025-03-04")
    assert client.get("/puzzle").json()["streak"] == 0
