from app.models import Favorite


def test_add_favorite_is_idempotent(client, create_spot, user_headers, db):
    spot_id = create_spot()

    first = client.post(f"/api/favorites/{spot_id}", headers=user_headers)
    second = client.post(f"/api/favorites/{spot_id}", headers=user_headers)

    assert first.status_code == second.status_code == 200
    assert second.json() == {"spotId": spot_id, "favorite": True}
    assert db.query(Favorite).count() == 1
    assert client.get("/api/favorites", headers=user_headers).json() == {"spotIds": [spot_id]}


def test_remove_favorite_is_idempotent(client, create_spot, user_headers):
    spot_id = create_spot()
    client.post(f"/api/favorites/{spot_id}", headers=user_headers)

    first = client.delete(f"/api/favorites/{spot_id}", headers=user_headers)
    second = client.delete(f"/api/favorites/{spot_id}", headers=user_headers)

    assert first.status_code == second.status_code == 200
    assert second.json() == {"spotId": spot_id, "favorite": False}
    assert client.get("/api/favorites", headers=user_headers).json() == {"spotIds": []}


def test_favorite_unknown_spot_is_404(client, user_headers):
    assert client.post("/api/favorites/12345", headers=user_headers).status_code == 404


def test_favorites_require_login(client, create_spot):
    spot_id = create_spot()

    assert client.get("/api/favorites").status_code == 401
    assert client.post(f"/api/favorites/{spot_id}").status_code == 401


def test_favorites_only_listing(client, create_spot, user_headers, admin_headers):
    liked = create_spot(name="Liked")
    create_spot(name="Ignored")
    client.post(f"/api/favorites/{liked}", headers=user_headers)

    mine = client.get("/api/spots", params={"favoritesOnly": "true"}, headers=user_headers).json()["spots"]
    admins = client.get("/api/spots", params={"favoritesOnly": "true"}, headers=admin_headers).json()["spots"]

    assert [s["name"] for s in mine] == ["Liked"]
    assert admins == []


def test_favorites_only_anonymous_is_401(client):
    response = client.get("/api/spots", params={"favoritesOnly": "true"})

    assert response.status_code == 401


def test_listing_with_stale_token_is_public(client, create_spot):
    create_spot()
    stale = {"Authorization": "Bearer expired.or.revoked"}

    response = client.get("/api/spots", headers=stale)
    assert response.status_code == 200
    assert len(response.json()["spots"]) == 1

    favorites = client.get("/api/spots", params={"favoritesOnly": "true"}, headers=stale)
    assert favorites.status_code == 401


def test_listing_after_logout_ignores_revoked_token(client, create_spot, user_headers):
    create_spot()
    client.post("/api/auth/logout", headers=user_headers)

    response = client.get("/api/spots", headers=user_headers)

    assert response.status_code == 200
    assert len(response.json()["spots"]) == 1
