from datetime import timedelta


def _create_business(client, name="Tech Haven", category="Electronics"):
    r = client.post(
        "/businesses",
        json={
            "name": name,
            "category": category,
            "description": "Your local electronics store with the latest gadgets",
            "address": "123 Main St",
            "phone": "555-0123",
            "website": "techhaven.com",
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def _captcha(client, session_id=None):
    payload = {"session_id": session_id} if session_id else {}
    r = client.post("/captcha", json=payload)
    assert r.status_code == 201, r.text
    body = r.json()
    answer = client.app.state.directory.challenges.active(body["session_id"]).expected_answer
    return body, answer


def test_me_returns_local_user(client):
    r = client.get("/me")
    assert r.status_code == 200, r.text
    assert r.json()["id"] == "demo-user-123"


def test_business_lifecycle(client):
    created = _create_business(client)
    assert created["average_rating"] == 0.0
    assert created["review_count"] == 0
    assert created["has_deals"] is False

    r = client.get(f"/businesses/{created['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Tech Haven"

    _create_business(client, name="Cafe Bliss", category="Food")
    listing = client.get("/businesses").json()
    assert listing["total"] == 2

    found = client.get("/businesses", params={"q": "bliss"}).json()
    assert [b["name"] for b in found["items"]] == ["Cafe Bliss"]


def test_unknown_business_is_404_with_code(client):
    r = client.get("/businesses/ghost")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "not_found"
    assert r.json()["detail"]["retryable"] is False


def test_captcha_never_leaks_answer(client):
    body, _ = _captcha(client)
    assert set(body) == {"session_id", "question", "issued_at"}


def test_review_flow_updates_business(client):
    business = _create_business(client)
    body, answer = _captcha(client)

    r = client.post(
        f"/businesses/{business['id']}/reviews",
        json={
            "rating": 5,
            "comment": "Great service here",
            "session_id": body["session_id"],
            "captcha_answer": answer,
        },
    )
    assert r.status_code == 201, r.text
    result = r.json()
    assert result["review"]["user_id"] == "demo-user-123"
    assert result["business"]["review_count"] == 1
    assert result["business"]["average_rating"] == 5.0

    reviews = client.get(f"/businesses/{business['id']}/reviews").json()
    assert reviews["total"] == 1


def test_review_uses_user_header(client):
    business = _create_business(client)
    body, answer = _captcha(client)
    r = client.post(
        f"/businesses/{business['id']}/reviews",
        json={"rating": 4, "comment": "Helpful and friendly", "session_id": body["session_id"], "captcha_answer": answer},
        headers={"X-User-Id": "someone-else"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["review"]["user_id"] == "someone-else"


def test_review_errors_map_to_status_codes(client):
    business = _create_business(client)
    url = f"/businesses/{business['id']}/reviews"

    body, _ = _captcha(client)
    r = client.post(url, json={"rating": 0, "comment": "x", "session_id": body["session_id"], "captcha_answer": "-1"})
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "challenge_failed"

    body, answer = _captcha(client, body["session_id"])
    r = client.post(url, json={"rating": 6, "comment": "Great service here", "session_id": body["session_id"], "captcha_answer": answer})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_rating"

    r = client.post(url, json={"rating": 4, "comment": "meh", "session_id": body["session_id"], "captcha_answer": answer})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_comment"

    assert client.get(f"/businesses/{business['id']}").json()["review_count"] == 0


def test_favorites_endpoints(client):
    business = _create_business(client)
    bid = business["id"]

    assert client.get(f"/favorites/{bid}").json()["is_favorite"] is False

    assert client.put(f"/favorites/{bid}").status_code == 200
    assert client.put(f"/favorites/{bid}").status_code == 200
    assert client.get(f"/favorites/{bid}").json()["is_favorite"] is True

    favorites = client.get("/favorites").json()
    assert favorites["total"] == 1
    assert favorites["items"][0]["id"] == bid

    assert client.delete(f"/favorites/{bid}").status_code == 204
    assert client.delete(f"/favorites/{bid}").status_code == 204
    assert client.get("/favorites").json()["total"] == 0

    assert client.put("/favorites/ghost").status_code == 404


def test_deal_endpoints(client):
    business = _create_business(client)
    bid = business["id"]
    now = client.app.state.directory.clock()

    r = client.post(
        f"/businesses/{bid}/deals",
        json={
            "title": "20% off",
            "description": "Gadgets for less",
            "discount_code": "SAVE20",
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        },
    )
    assert r.status_code == 201, r.text
    deal = r.json()

    assert client.get(f"/businesses/{bid}").json()["has_deals"] is True
    assert [d["id"] for d in client.get("/deals/active").json()["items"]] == [deal["id"]]
    assert client.get(f"/businesses/{bid}/deals").json()["total"] == 1

    r = client.patch(f"/deals/{deal['id']}", json={"is_active": False})
    assert r.status_code == 200, r.text
    assert client.get("/deals/active").json()["total"] == 0
    assert client.get(f"/businesses/{bid}/deals").json()["total"] == 1
    assert client.get(f"/businesses/{bid}/deals", params={"active": "true"}).json()["total"] == 0
    assert client.get(f"/businesses/{bid}").json()["has_deals"] is False


def test_invalid_deal_window_is_422(client):
    business = _create_business(client)
    now = client.app.state.directory.clock()
    r = client.post(
        f"/businesses/{business['id']}/deals",
        json={"title": "Broken", "start_date": now.isoformat(), "end_date": now.isoformat()},
    )
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_deal"


def test_challenge_checked_before_loose_payload_errors(client):
    business = _create_business(client)
    url = f"/businesses/{business['id']}/reviews"

    body, _ = _captcha(client)
    r = client.post(url, json={"rating": "abc", "comment": "x", "session_id": body["session_id"], "captcha_answer": "-1"})
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "challenge_failed"

    r = client.post(url, json={"rating": 5, "comment": "Great service here"})
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "challenge_failed"

    body, answer = _captcha(client, body["session_id"])
    r = client.post(url, json={"rating": 5, "comment": "x" * 3000, "session_id": body["session_id"], "captcha_answer": answer})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "invalid_comment"

    r = client.post(url, json={"rating": "4", "comment": "Great service here", "session_id": body["session_id"], "captcha_answer": answer})
    assert r.status_code == 201, r.text
    assert r.json()["review"]["rating"] == 4


def test_business_listing_filters_and_sorts(client):
    _create_business(client, name="Tech Haven", category="Electronics")
    _create_business(client, name="Cafe Bliss", category="Food")
    _create_business(client, name="Bakery Bloom", category="Food")

    r = client.get("/businesses", params={"category": "Food", "sort": "name"})
    assert r.status_code == 200, r.text
    assert [b["name"] for b in r.json()["items"]] == ["Bakery Bloom", "Cafe Bliss"]

    r = client.get("/businesses", params={"q": "b", "category": "All", "sort": "name"})
    assert [b["name"] for b in r.json()["items"]] == ["Bakery Bloom", "Cafe Bliss"]

    assert client.get("/businesses", params={"sort": "distance"}).status_code == 422
    assert client.get("/businesses/categories").json() == ["Electronics", "Food"]
