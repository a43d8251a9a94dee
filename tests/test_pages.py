from sqlalchemy import func, select

from bizmarket.models import ApprovalStatus, Business, TransactionType
from bizmarket.services.pagination import MAX_PAGE
from bizmarket.services.submission import CREATED_MESSAGE


def form_files(*names):
    return [("photos", (name, b"\x89PNG fake", "image/png")) for name in names]


# ---------- browse / search ----------

def test_root_redirects_to_businesses(client):
    res = client.get("/", follow_redirects=False)
    assert res.status_code == 307
    assert res.headers["location"] == "/businesses"


def test_browse_page_lists_visible_businesses(client, make_business, make_category):
    make_category(name="Logistics", business_count=3)
    make_business("Cafe Deluxe")
    make_business("Cafe Hidden", status=ApprovalStatus.PENDING)

    res = client.get("/businesses")
    assert res.status_code == 200
    assert "Cafe Deluxe" in res.text
    assert "Cafe Hidden" not in res.text
    assert "Logistics" in res.text


def test_browse_api_on_empty_store(client, make_category):
    make_category(name="Retail")

    body = client.get("/api/businesses").json()
    assert body["ok"] is True
    for key in ("auction", "sale", "investment", "lease"):
        assert body[key]["data"] == []
        assert body[key]["total"] == 0
    assert [c["name"] for c in body["categories"]] == ["Retail"]
    assert [c["name"] for c in body["popular_categories"]] == ["Retail"]


def test_search_api_filters_and_echoes_inputs(client, make_business):
    make_business("Cafe Deluxe", transaction_type=TransactionType.LEASE)
    make_business("Cafe Hidden", status=ApprovalStatus.PENDING)
    make_business("Barber Shop")

    body = client.get(
        "/api/businesses/search",
        params={"search": "Cafe", "category": "", "activeTransactionType": "lease"},
    ).json()
    assert [b["business_name"] for b in body["lease"]["data"]] == ["Cafe Deluxe"]
    assert body["sale"]["data"] == []
    assert body["search"] == "Cafe"
    assert body["category"] is None
    assert body["active_transaction_type"] == "lease"


def test_active_transaction_type_does_not_filter(client, make_business):
    make_business("Corner Shop")
    body = client.get("/api/businesses/search", params={"activeTransactionType": "auction"}).json()
    assert [b["business_name"] for b in body["sale"]["data"]] == ["Corner Shop"]


def test_search_page_renders(client, make_business):
    make_business("Cafe Deluxe")
    make_business("Tea Room")

    res = client.get("/businesses/search", params={"search": "Cafe"})
    assert res.status_code == 200
    assert "Cafe Deluxe" in res.text
    assert "Tea Room" not in res.text


# ---------- detail ----------

def test_missing_business_is_not_an_error(client):
    res = client.get("/business/does-not-exist")
    assert res.status_code == 200
    assert "does not exist" in res.text

    body = client.get("/api/businesses/does-not-exist").json()
    assert body["business"] is None
    assert body["bookmarks"] == []
    assert body["is_logged_in"] is False
    assert body["user"] is None


def test_detail_for_anonymous_viewer(client, make_business):
    business = make_business("Cafe Deluxe")

    body = client.get(f"/api/businesses/{business.listing_id}").json()
    assert body["business"]["business_name"] == "Cafe Deluxe"
    assert body["business"]["owner"]["name"] == "Owner"
    assert body["business"]["property"]["name"] == "Leased"
    assert body["business"]["watchers"] == []
    assert body["is_logged_in"] is False


def test_detail_includes_viewer_bookmarks(client, db, make_business, make_user, auth_headers):
    business = make_business("Cafe Deluxe")
    viewer = make_user(name="Viewer")
    viewer.bookmarks.append(business)
    business.watchers.append(viewer)
    db.commit()

    body = client.get(f"/api/businesses/{business.listing_id}", headers=auth_headers(viewer)).json()
    assert body["is_logged_in"] is True
    assert body["user"]["id"] == viewer.id
    assert body["bookmarks"] == [
        {"id": business.id, "listing_id": business.listing_id, "business_name": "Cafe Deluxe"}
    ]
    assert [w["name"] for w in body["business"]["watchers"]] == ["Viewer"]

    res = client.get(f"/business/{business.listing_id}", headers=auth_headers(viewer))
    assert "Bookmarked" in res.text


def test_detail_shows_pending_business_by_id(client, make_business):
    business = make_business("Under Review", status=ApprovalStatus.PENDING)
    body = client.get(f"/api/businesses/{business.listing_id}").json()
    assert body["business"]["status"] == "pending"
    assert body["business"]["is_public"] is False


# ---------- creation ----------

def test_post_form_requires_login(client):
    assert client.get("/post").status_code == 401


def test_post_form_lists_reference_data(client, make_user, make_category, make_property, auth_headers):
    make_category(name="Hospitality")
    make_property(name="Owned")
    res = client.get("/post", headers=auth_headers(make_user()))
    assert res.status_code == 200
    assert "Hospitality" in res.text
    assert "Owned" in res.text
    assert "Investment" in res.text


def test_create_redirects_back_with_message(client, db, make_user, auth_headers, valid_payload):
    user = make_user()
    res = client.post(
        "/businesses",
        data=valid_payload,
        files=form_files("a.png", "b.png"),
        headers={**auth_headers(user), "Referer": "/businesses"},
        follow_redirects=False,
    )
    assert res.status_code == 303
    assert res.headers["location"] == "/businesses"

    business = db.execute(select(Business)).scalar_one()
    assert business.business_name == "Cafe Deluxe"
    assert len(business.images) == 2

    page = client.get("/businesses")
    assert CREATED_MESSAGE in page.text
    # flash показывается один раз
    assert CREATED_MESSAGE not in client.get("/businesses").text


def test_create_with_errors_rerenders_form(client, db, make_user, auth_headers, valid_payload):
    valid_payload["business_year"] = "12"
    res = client.post(
        "/businesses",
        data=valid_payload,
        files=form_files("a.png"),
        headers=auth_headers(make_user()),
    )
    assert res.status_code == 422
    assert "The business year must be 4 digits." in res.text
    assert 'value="Cafe Deluxe"' in res.text
    assert db.execute(select(func.count()).select_from(Business)).scalar_one() == 0


def test_create_requires_login(client, valid_payload):
    res = client.post("/businesses", data=valid_payload, files=form_files("a.png"))
    assert res.status_code == 401


def test_api_create_and_validation_errors(client, make_user, auth_headers, valid_payload):
    headers = auth_headers(make_user())

    res = client.post("/api/businesses", data=valid_payload, files=form_files("a.png"), headers=headers)
    assert res.status_code == 201
    body = res.json()
    assert body["ok"] is True
    assert body["message"] == CREATED_MESSAGE
    assert body["listing_id"]

    again = client.post("/api/businesses", data=valid_payload, files=form_files("a.png"), headers=headers)
    assert again.status_code == 422
    assert again.json() == {
        "ok": False,
        "errors": {
            "business_name": "The business name has already been taken.",
            "business_number": "Reg. number has been used!",
        },
    }


def test_update_is_a_noop(client, make_user, make_business, auth_headers):
    business = make_business("Static")
    res = client.put(f"/businesses/{business.listing_id}", headers=auth_headers(make_user()))
    assert res.status_code == 204


def test_page_number_is_bounded(client, make_business):
    make_business("Only One")
    assert client.get("/api/businesses", params={"page": 10**18}).status_code == 422
    assert client.get("/businesses/search", params={"page": 10**18}).status_code == 422

    body = client.get("/api/businesses", params={"page": MAX_PAGE}).json()
    assert body["sale"]["data"] == []
    assert body["sale"]["total"] == 1
