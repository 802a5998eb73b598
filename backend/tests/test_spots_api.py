from app.models import Media, OpeningHours, Spot, Tip


def test_create_spot_scenario(client, admin_headers):
    response = client.post(
        "/api/spots",
        json={
            "name": "Test Cafe",
            "description": "A test cafe",
            "category": "restaurant",
            "lat": 48.85,
            "lng": 2.35,
            "price": 10,
            "rating": 4.2,
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Spot created successfully"
    assert isinstance(body["spotId"], int)

    by_category = client.get("/api/spots", params={"category": "restaurant"}).json()["spots"]
    assert [s["id"] for s in by_category] == [body["spotId"]]

    by_search = client.get("/api/spots", params={"search": "test"}).json()["spots"]
    assert [s["name"] for s in by_search] == ["Test Cafe"]


def test_create_then_read_round_trips_fields(client, create_spot):
    spot_id = create_spot(
        name="Round Trip",
        description="Checks every scalar",
        lat=48.8584,
        lng=2.2945,
        price=35.5,
        rating=4.7,
        editorPick=True,
    )

    spot = client.get(f"/api/spots/{spot_id}").json()["spot"]

    assert spot["name"] == "Round Trip"
    assert spot["description"] == "Checks every scalar"
    assert spot["lat"] == 48.8584
    assert spot["lng"] == 2.2945
    assert spot["price"] == 35.5
    assert spot["rating"] == 4.7
    assert spot["editorPick"] is True
    assert spot["category"] == "restaurant"
    assert spot["categoryName"] == "Food"


def test_create_with_nested_children(client, create_spot):
    spot_id = create_spot(
        media=[
            {"type": "image", "url": "https://img/1.jpg", "thumbnail": "https://img/1t.jpg", "caption": "Front"},
            {"type": "video", "url": "https://vid/1.mp4"},
        ],
        tips=["Go early", "  ", "Book ahead "],
        social={"instagram": "https://instagram.com/cafe", "website": "https://cafe.example"},
        hours={"1": {"open": "09:00", "close": "17:00"}, "0": {"isClosed": True}},
        author={"name": "Marie", "avatar": "https://img/marie.jpg"},
        relatedArticle={"title": "Best cafes", "url": "https://blog/cafes"},
    )

    spot = client.get(f"/api/spots/{spot_id}").json()["spot"]

    assert [m["type"] for m in spot["media"]] == ["image", "video"]
    assert spot["media"][0]["thumbnail"] == "https://img/1t.jpg"
    assert spot["media"][1]["displayOrder"] == 1
    assert spot["tips"] == ["Go early", "Book ahead"]
    assert spot["social"] == {"instagram": "https://instagram.com/cafe", "website": "https://cafe.example"}
    assert spot["openingHours"] == [
        {"dayOfWeek": 0, "open": None, "close": None, "isClosed": True},
        {"dayOfWeek": 1, "open": "09:00", "close": "17:00", "isClosed": False},
    ]
    assert spot["author"] == {"name": "Marie", "avatar": "https://img/marie.jpg"}
    assert spot["relatedArticle"] == {"title": "Best cafes", "url": "https://blog/cafes"}


def test_spot_without_children_gets_empty_defaults(client, create_spot):
    spot_id = create_spot(category=None, icon=None)

    spot = client.get(f"/api/spots/{spot_id}").json()["spot"]

    assert spot["media"] == []
    assert spot["tips"] == []
    assert spot["openingHours"] == []
    assert spot["social"] == {}
    assert spot["author"] is None
    assert spot["relatedArticle"] is None
    assert spot["category"] == "restaurant"
    assert spot["icon"] == "📍"


def test_category_all_returns_everything(client, create_spot):
    create_spot(name="Cafe", category="restaurant")
    create_spot(name="Louvre", category="museum")

    everything = client.get("/api/spots", params={"category": "all"}).json()["spots"]
    museums = client.get("/api/spots", params={"category": "museum"}).json()["spots"]

    assert [s["name"] for s in everything] == ["Cafe", "Louvre"]
    assert [s["name"] for s in museums] == ["Louvre"]
    assert all(s["category"] == "museum" for s in museums)


def test_search_matches_description_case_insensitively(client, create_spot):
    create_spot(name="Alpha", description="Famous CROISSANTS")
    create_spot(name="Beta", description="Quiet garden")

    spots = client.get("/api/spots", params={"search": "croissant"}).json()["spots"]

    assert [s["name"] for s in spots] == ["Alpha"]


def test_search_wildcards_match_literally(client, create_spot):
    create_spot(name="100% Organic")
    create_spot(name="Plain Bakery")

    spots = client.get("/api/spots", params={"search": "%"}).json()["spots"]

    assert [s["name"] for s in spots] == ["100% Organic"]


def test_radius_filter(client, create_spot):
    create_spot(name="Near", lat=48.8566, lng=2.3522)
    create_spot(name="Versailles", lat=48.8049, lng=2.1204)

    spots = client.get(
        "/api/spots", params={"lat": 48.8566, "lng": 2.3522, "radius": 5}
    ).json()["spots"]

    assert [s["name"] for s in spots] == ["Near"]


def test_filters_combine(client, create_spot):
    create_spot(name="Cafe Near", lat=48.8566, lng=2.3522)
    create_spot(name="Museum Near", category="museum", lat=48.8570, lng=2.3530)
    create_spot(name="Cafe Far", lat=48.8049, lng=2.1204)

    spots = client.get(
        "/api/spots",
        params={"category": "restaurant", "search": "cafe", "lat": 48.8566, "lng": 2.3522, "radius": 3},
    ).json()["spots"]

    assert [s["name"] for s in spots] == ["Cafe Near"]


def test_get_missing_spot_is_404(client):
    response = client.get("/api/spots/999")

    assert response.status_code == 404
    assert response.json()["error"] == "Spot not found"
    assert "request_id" in response.json()


def test_soft_delete_hides_spot_but_keeps_row(client, create_spot, admin_headers, db):
    spot_id = create_spot()

    response = client.delete(f"/api/spots/{spot_id}", headers=admin_headers)
    assert response.status_code == 200

    assert client.get(f"/api/spots/{spot_id}").status_code == 404
    assert client.get("/api/spots").json()["spots"] == []

    row = db.query(Spot).filter(Spot.id == spot_id).one()
    assert row.is_active is False


def test_delete_twice_is_404(client, create_spot, admin_headers):
    spot_id = create_spot()
    client.delete(f"/api/spots/{spot_id}", headers=admin_headers)

    assert client.delete(f"/api/spots/{spot_id}", headers=admin_headers).status_code == 404


def test_partial_update_keeps_other_fields(client, create_spot, admin_headers):
    spot_id = create_spot(tips=["Keep me"])

    response = client.put(f"/api/spots/{spot_id}", json={"price": 25}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Spot updated successfully", "spotId": spot_id}

    spot = client.get(f"/api/spots/{spot_id}").json()["spot"]
    assert spot["price"] == 25
    assert spot["name"] == "Test Cafe"
    assert spot["tips"] == ["Keep me"]


def test_update_replaces_provided_collections(client, create_spot, admin_headers, db):
    spot_id = create_spot(
        tips=["Old tip"],
        hours=[{"dayOfWeek": 1, "open": "09:00", "close": "17:00"}],
        media=[{"type": "image", "url": "https://img/old.jpg"}],
    )

    response = client.put(
        f"/api/spots/{spot_id}",
        json={"tips": ["New tip"], "hours": [{"dayOfWeek": 1, "open": "10:00", "close": "18:00"}]},
        headers=admin_headers,
    )
    assert response.status_code == 200

    spot = client.get(f"/api/spots/{spot_id}").json()["spot"]
    assert spot["tips"] == ["New tip"]
    assert spot["openingHours"][0]["open"] == "10:00"
    assert [m["url"] for m in spot["media"]] == ["https://img/old.jpg"]
    assert db.query(Tip).filter(Tip.spot_id == spot_id).count() == 1
    assert db.query(OpeningHours).filter(OpeningHours.spot_id == spot_id).count() == 1
    assert db.query(Media).filter(Media.spot_id == spot_id).count() == 1


def test_update_drops_blank_tips(client, create_spot, admin_headers):
    spot_id = create_spot(tips=["", "  ", "ok"])
    assert client.get(f"/api/spots/{spot_id}").json()["spot"]["tips"] == ["ok"]

    response = client.put(
        f"/api/spots/{spot_id}", json={"tips": ["", "  ", " fresh "]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert client.get(f"/api/spots/{spot_id}").json()["spot"]["tips"] == ["fresh"]


def test_update_trims_name(client, create_spot, admin_headers):
    spot_id = create_spot()

    client.put(f"/api/spots/{spot_id}", json={"name": "  Renamed  "}, headers=admin_headers)

    assert client.get(f"/api/spots/{spot_id}").json()["spot"]["name"] == "Renamed"


def test_update_rejects_blank_name(client, create_spot, admin_headers):
    spot_id = create_spot()

    response = client.put(f"/api/spots/{spot_id}", json={"name": "   "}, headers=admin_headers)

    assert response.status_code == 400
    assert client.get(f"/api/spots/{spot_id}").json()["spot"]["name"] == "Test Cafe"


def test_update_missing_spot_is_404(client, admin_headers):
    response = client.put("/api/spots/42", json={"name": "Ghost"}, headers=admin_headers)

    assert response.status_code == 404


def test_update_rejects_null_name(client, create_spot, admin_headers):
    spot_id = create_spot()

    response = client.put(f"/api/spots/{spot_id}", json={"name": None}, headers=admin_headers)

    assert response.status_code == 400


def test_create_requires_token(client):
    response = client.post("/api/spots", json={"name": "X", "lat": 1, "lng": 1})

    assert response.status_code == 401


def test_create_with_bad_token_is_403(client):
    response = client.post(
        "/api/spots", json={"name": "X", "lat": 1, "lng": 1},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 403


def test_create_as_regular_user_is_403(client, user_headers):
    response = client.post("/api/spots", json={"name": "X", "lat": 1, "lng": 1}, headers=user_headers)

    assert response.status_code == 403


def test_create_validates_coordinates(client, admin_headers, db):
    response = client.post("/api/spots", json={"name": "X", "lat": 95, "lng": 1}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["errors"]
    assert db.query(Spot).count() == 0


def test_create_rejects_blank_name(client, admin_headers, db):
    response = client.post("/api/spots", json={"name": "   ", "lat": 1, "lng": 1}, headers=admin_headers)

    assert response.status_code == 400
    assert db.query(Spot).count() == 0


def test_create_with_unknown_category_is_400(client, admin_headers):
    response = client.post(
        "/api/spots", json={"name": "X", "lat": 1, "lng": 1, "category": "nightclub"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert "nightclub" in response.json()["error"]


def test_failed_child_insert_rolls_back_spot(client, admin_headers, db, monkeypatch):
    from app.services import spot_writer

    # A tip without text violates NOT NULL at commit time
    monkeypatch.setattr(
        spot_writer, "_tip_rows",
        lambda tips, user_id: [Tip(tip_text=None, display_order=0, created_by=user_id)],
    )

    response = client.post(
        "/api/spots", json={"name": "Broken", "lat": 1, "lng": 1, "tips": ["x"]},
        headers=admin_headers,
    )

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to create spot"
    assert db.query(Spot).count() == 0


def test_mutations_are_logged(client, create_spot, admin_headers):
    spot_id = create_spot()
    client.delete(f"/api/spots/{spot_id}", headers=admin_headers)

    logs = client.get("/api/logs", headers=admin_headers).json()["logs"]

    assert [(log["action"], log["entityId"]) for log in logs[:2]] == [
        ("delete", str(spot_id)),
        ("create", str(spot_id)),
    ]
