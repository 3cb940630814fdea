import io

from openpyxl import load_workbook

from services.export_service import XLSX_MEDIA_TYPE

GAME = {"date": "10/22/2025", "time": "7:30 PM", "day": "WED", "opponent": "Knicks",
        "tier": "Gold", "price": 85}


def _join(client, code, name, email):
    res = client.post(f"/api/rooms/{code}/join", json={"name": name, "email": email})
    assert res.status_code == 200, res.text
    return res.json()


def _add_game(client, code, **overrides):
    res = client.post(f"/api/rooms/{code}/games", json={**GAME, **overrides})
    assert res.status_code == 201, res.text
    return res.json()


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_room_generates_code(client):
    res = client.post("/api/rooms")
    assert res.status_code == 200
    body = res.json()
    assert len(body["code"]) == 6
    assert body["turn"] == 0
    assert body["snake"] is True
    assert client.get(f"/api/rooms/{body['code']}").status_code == 200


def test_join_creates_room_and_appends(client):
    body = _join(client, "celtix25", "Alice", "alice@example.com")
    assert body["room_code"] == "CELTIX25"
    assert body["renamed"] is False
    assert body["room"]["draft_order"] == ["Alice"]

    body = _join(client, "CELTIX25", "Bob", "bob@example.com")
    assert body["room"]["draft_order"] == ["Alice", "Bob"]


def test_rejoin_with_new_name_renames_in_place(client):
    _join(client, "ROOM", "Bob", "bob@example.com")
    first = _join(client, "ROOM", "Alice", "alice@example.com")
    again = _join(client, "room", "Ally", "ALICE@example.com")

    assert again["player_id"] == first["player_id"]
    assert again["renamed"] is True
    assert again["room"]["draft_order"] == ["Bob", "Ally"]

    state = client.get("/api/rooms/room").json()
    assert [p["name"] for p in state["players"]] == ["Bob", "Ally"]


def test_join_validation(client):
    res = client.post("/api/rooms/ROOM/join", json={"name": " ", "email": "x@example.com"})
    assert res.status_code == 400
    assert client.get("/api/rooms/ROOM").status_code == 404


def test_room_state_snapshot(client):
    _join(client, "ROOM", "A", "a@example.com")
    _join(client, "ROOM", "B", "b@example.com")
    game = _add_game(client, "ROOM")

    state = client.get("/api/rooms/room").json()
    assert state["code"] == "ROOM"
    assert state["current_player"] == "A"
    assert state["current_index"] == 0
    assert [g["id"] for g in state["games"]] == [game["id"]]
    assert state["picks"] == {"A": [], "B": []}


def test_unknown_room(client):
    assert client.get("/api/rooms/NOPE").status_code == 404
    assert client.get("/api/rooms/NOPE/games").status_code == 404
    assert client.put("/api/rooms/NOPE/snake", json={"snake": False}).status_code == 404
    assert client.post("/api/rooms/NOPE/order/shuffle").status_code == 404


def test_order_editing(client):
    for name in ["Cy", "Al", "Bo"]:
        _join(client, "ROOM", name, f"{name}@example.com")

    res = client.post("/api/rooms/ROOM/order/first", json={"index": 2})
    assert res.json()["draft_order"] == ["Bo", "Cy", "Al"]

    res = client.post("/api/rooms/ROOM/order/move", json={"index": 0, "direction": 1})
    assert res.json()["draft_order"] == ["Cy", "Bo", "Al"]

    res = client.post("/api/rooms/ROOM/order/move", json={"index": 0, "direction": -1})
    assert res.json()["draft_order"] == ["Cy", "Bo", "Al"]

    res = client.post("/api/rooms/ROOM/order/alphabetical")
    assert res.json()["draft_order"] == ["Al", "Bo", "Cy"]

    res = client.post("/api/rooms/ROOM/order/shuffle")
    assert sorted(res.json()["draft_order"]) == ["Al", "Bo", "Cy"]


def test_add_game_validation(client):
    _join(client, "ROOM", "A", "a@example.com")
    res = client.post("/api/rooms/ROOM/games", json={**GAME, "opponent": ""})
    assert res.status_code == 400
    res = client.post("/api/rooms/ROOM/games", json={k: v for k, v in GAME.items() if k != "price"})
    assert res.status_code == 400
    assert client.get("/api/rooms/ROOM/games").json() == []


def test_add_game_unknown_room(client):
    assert client.post("/api/rooms/NOPE/games", json=GAME).status_code == 404


def test_list_games_filters(client):
    _join(client, "ROOM", "A", "a@example.com")
    _add_game(client, "ROOM", opponent="Knicks", tier="Gold", day="WED")
    _add_game(client, "ROOM", opponent="Heat", tier="Platinum", day="SAT", price="120.50")

    assert [g["opponent"] for g in client.get("/api/rooms/ROOM/games?tier=Platinum").json()] == ["Heat"]
    assert [g["opponent"] for g in client.get("/api/rooms/ROOM/games?day=WED").json()] == ["Knicks"]
    assert [g["opponent"] for g in client.get("/api/rooms/ROOM/games?q=hea").json()] == ["Heat"]
    assert client.get("/api/rooms/ROOM/games?tier=Platinum").json()[0]["price"] == 120.5


def test_remove_game(client):
    _join(client, "ROOM", "A", "a@example.com")
    game = _add_game(client, "ROOM")
    assert client.delete(f"/api/rooms/ROOM/games/{game['id']}").json() == {"status": "ok"}
    assert client.delete(f"/api/rooms/ROOM/games/{game['id']}").status_code == 404


def test_draft_flow(client):
    _join(client, "ROOM", "A", "a@example.com")
    _join(client, "ROOM", "B", "b@example.com")
    g1 = _add_game(client, "ROOM", opponent="Knicks")
    g2 = _add_game(client, "ROOM", opponent="Heat")

    res = client.post(f"/api/rooms/ROOM/games/{g1['id']}/draft", json={"player_name": "B"})
    assert res.status_code == 403
    assert res.json()["detail"]["outcome"] == "not_your_turn"
    assert res.json()["detail"]["current_player"] == "A"

    res = client.post(f"/api/rooms/ROOM/games/{g1['id']}/draft", json={"player_name": "A"})
    assert res.status_code == 200
    assert res.json()["outcome"] == "success"
    assert res.json()["turn"] == 1

    res = client.post(f"/api/rooms/ROOM/games/{g1['id']}/draft", json={"player_name": "B"})
    assert res.status_code == 409
    assert res.json()["detail"]["outcome"] == "already_taken"

    state = client.get("/api/rooms/ROOM").json()
    assert state["turn"] == 1
    assert state["current_player"] == "B"
    assert [g["opponent"] for g in state["picks"]["A"]] == ["Knicks"]

    available = client.get("/api/rooms/ROOM/games?available=true").json()
    assert [g["id"] for g in available] == [g2["id"]]


def test_draft_unknown_room(client):
    res = client.post("/api/rooms/NOPE/games/1/draft", json={"player_name": "A"})
    assert res.status_code == 404


def test_snake_toggle_changes_order(client):
    for name in ["A", "B"]:
        _join(client, "ROOM", name, f"{name}@example.com")
    games = [_add_game(client, "ROOM", opponent=f"T{i}") for i in range(3)]
    client.post(f"/api/rooms/ROOM/games/{games[0]['id']}/draft", json={"player_name": "A"})
    client.post(f"/api/rooms/ROOM/games/{games[1]['id']}/draft", json={"player_name": "B"})

    # turn 2, snake: round 1 starts from the back
    assert client.get("/api/rooms/ROOM").json()["current_player"] == "B"

    res = client.put("/api/rooms/ROOM/snake", json={"snake": False})
    assert res.json()["snake"] is False
    assert client.get("/api/rooms/ROOM").json()["current_player"] == "A"


def test_exports(client):
    _join(client, "ROOM", "A", "a@example.com")
    g1 = _add_game(client, "ROOM", opponent="Knicks")
    _add_game(client, "ROOM", opponent="Heat", price="1234.5")
    client.post(f"/api/rooms/ROOM/games/{g1['id']}/draft", json={"player_name": "A"})

    res = client.get("/api/rooms/ROOM/export.csv")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "celtics_2025-26_draft.csv" in res.headers["content-disposition"]
    lines = res.text.splitlines()
    assert len(lines) == 2
    assert lines[1].startswith('"A","10/22/2025"')

    res = client.get("/api/rooms/ROOM/export.xlsx")
    assert res.status_code == 200
    assert res.headers["content-type"] == XLSX_MEDIA_TYPE
    assert "celtics_2025-26_draft.xlsx" in res.headers["content-disposition"]
    ws = load_workbook(io.BytesIO(res.content))["Draft"]
    assert ws.max_row == 3
    assert ws["E3"].value == "Heat"
    assert ws["G3"].value == 1234.5
    assert ws["G3"].number_format == "$#,##0.00"
    assert ws["H2"].value == "A"

    assert client.get("/api/rooms/NOPE/export.csv").status_code == 404
    assert client.get("/api/rooms/NOPE/export.xlsx").status_code == 404


def test_websocket_invalidation_on_change(client):
    _join(client, "ROOM", "A", "a@example.com")
    game = _add_game(client, "ROOM")

    with client.websocket_connect("/ws/rooms/room") as ws:
        assert ws.receive_json() == {"type": "subscribed", "room": "ROOM"}
        client.post(f"/api/rooms/ROOM/games/{game['id']}/draft", json={"player_name": "A"})
        assert ws.receive_json() == {"type": "invalidate", "room": "ROOM"}


def test_order_move_only_to_a_neighbour(client):
    for name in ["A", "B", "C", "D"]:
        _join(client, "ROOM", name, f"{name}@example.com")

    res = client.post("/api/rooms/ROOM/order/move", json={"index": 0, "direction": 3})
    assert res.status_code == 422
    assert client.get("/api/rooms/ROOM").json()["draft_order"] == ["A", "B", "C", "D"]


def test_draft_unknown_game(client):
    _join(client, "ROOM", "A", "a@example.com")
    _join(client, "ROOM", "B", "b@example.com")

    res = client.post("/api/rooms/ROOM/games/9999/draft", json={"player_name": "A"})
    assert res.status_code == 404
    assert res.json()["detail"]["outcome"] == "game_not_found"
    assert client.get("/api/rooms/ROOM").json()["turn"] == 0


def test_websocket_ignores_client_frames(client):
    _join(client, "ROOM", "A", "a@example.com")
    game = _add_game(client, "ROOM")

    with client.websocket_connect("/ws/rooms/ROOM") as ws:
        assert ws.receive_json() == {"type": "subscribed", "room": "ROOM"}
        ws.send_bytes(b"\x00\x01")
        ws.send_text("ping")
        client.post(f"/api/rooms/ROOM/games/{game['id']}/draft", json={"player_name": "A"})
        assert ws.receive_json() == {"type": "invalidate", "room": "ROOM"}
