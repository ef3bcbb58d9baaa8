import asyncio


def test_create_room_returns_fresh_id(client, registry):
    response = client.get("/create-room")
    assert response.status_code == 200
    room_id = response.json()["roomId"]
    assert len(room_id) == 6
    assert registry.has_room(room_id)

    other = client.get("/create-room").json()["roomId"]
    assert other != room_id


def test_room_details(client, registry):
    asyncio.run(registry.join("a", "room1"))
    response = client.get("/rooms/room1")
    assert response.status_code == 200
    assert response.json() == {"roomId": "room1", "memberCount": 1, "capacity": 2, "isFull": False}

    asyncio.run(registry.join("b", "room1"))
    assert client.get("/rooms/room1").json()["isFull"] is True


def test_room_details_unknown_room(client):
    response = client.get("/rooms/nope")
    assert response.status_code == 404
    assert response.json() == {"detail": "Room not found"}


def test_health_check(client, registry):
    client.get("/create-room")
    body = client.get("/").json()
    assert body["status"] == "online"
    assert body["rooms"] == 1
    assert isinstance(body["connections"], int)
