PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def upload(client, name="午市套餐", filename="lunch.png", content_type="image/png", content=PNG_BYTES):
    return client.post(
        "/api/advertisements",
        files={"image": (filename, content, content_type)},
        data={"name": name},
    )


def test_get_restaurant_data(client):
    body = client.get("/api/restaurant").json()
    assert set(body) == {"config", "advertisements", "menu_items", "recommendations"}
    assert body["config"]["enable_auto_switch"] is False


def test_update_restaurant_config(client):
    payload = {"name": "老街面馆", "ad_rotation_time": 8, "auto_switch_time": 20, "enable_auto_switch": True}
    response = client.post("/api/restaurant/config", json=payload)
    assert response.status_code == 200
    assert client.get("/api/restaurant").json()["config"] == payload

    response = client.post("/api/restaurant/config", json={**payload, "auto_switch_time": -1})
    assert response.status_code == 400


def test_advertisement_lifecycle(client, app_settings):
    response = upload(client)
    assert response.status_code == 200
    ad = response.json()
    assert ad["name"] == "午市套餐"
    assert ad["filename"].startswith("ad_") and ad["filename"].endswith(".png")

    assert client.get(f"/uploads/{ad['filename']}").content == PNG_BYTES
    assert [a["id"] for a in client.get("/api/advertisements").json()] == [ad["id"]]

    response = client.put(f"/api/advertisements/{ad['id']}", json={"active": False})
    assert response.status_code == 200
    assert response.json()["active"] is False
    assert client.get("/api/advertisements").json() == []

    response = client.delete(f"/api/advertisements/{ad['id']}")
    assert response.status_code == 200
    assert client.get("/api/restaurant").json()["advertisements"] == []
    assert client.get(f"/uploads/{ad['filename']}").status_code == 404


def test_upload_rejects_non_image(client):
    response = upload(client, filename="menu.txt", content_type="text/plain", content=b"hello")
    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


def test_unknown_records_return_404(client):
    assert client.delete("/api/advertisements/missing").status_code == 404
    assert client.put("/api/advertisements/missing", json={"name": "x"}).status_code == 404
    assert client.put("/api/menu/missing", json={"name": "x"}).status_code == 404
    assert client.delete("/api/menu/missing").status_code == 404
    assert client.put("/api/recommendations/missing", json={"name": "x"}).status_code == 404
    response = client.delete("/api/recommendations/missing")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_menu_crud(client):
    created = client.post("/api/menu", json={"name": "麻婆豆腐", "price": 26, "category": "热菜"}).json()
    assert created["available"] is True

    updated = client.put(
        f"/api/menu/{created['id']}",
        json={"name": "麻婆豆腐", "price": 28, "category": "热菜", "available": False},
    ).json()
    assert updated["id"] == created["id"]
    assert updated["price"] == 28

    items = {i["id"]: i for i in client.get("/api/restaurant").json()["menu_items"]}
    assert items[created["id"]]["available"] is False

    assert client.delete(f"/api/menu/{created['id']}").status_code == 200
    ids = [i["id"] for i in client.get("/api/restaurant").json()["menu_items"]]
    assert created["id"] not in ids


def test_recommendation_crud(client):
    created = client.post("/api/recommendations", json={"name": "水煮鱼", "price": 58, "special": "限量"}).json()
    assert created["date"]

    updated = client.put(
        f"/api/recommendations/{created['id']}",
        json={"name": "水煮鱼", "price": 52, "special": "第二份半价"},
    ).json()
    assert updated["special"] == "第二份半价"
    assert updated["date"] == created["date"]

    assert client.delete(f"/api/recommendations/{created['id']}").status_code == 200
    ids = [r["id"] for r in client.get("/api/restaurant").json()["recommendations"]]
    assert created["id"] not in ids
