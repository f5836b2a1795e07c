import pytest
from fastapi.testclient import TestClient

from reliefhub.core.settings import Settings
from reliefhub.main import create_app
from reliefhub.services.collaborators import LocationErrorKind, StaticLocationSource
from reliefhub.services.container import build_container, load_seed_file
from reliefhub.services.recommendation_engine import synthetic_recommendation_id

VICTIM = {
    "id": "u-asha",
    "display_name": "Asha",
    "email": "asha@example.com",
    "role": "victim",
    "location": {"latitude": 22.7196, "longitude": 75.8577},
}

KITCHEN = {
    "id": "rp-kitchen",
    "title": "Community Kitchen",
    "description": "Hot meals twice a day",
    "category": "food",
    "location": {"latitude": 22.7186, "longitude": 75.8553},
    "location_label": "Rajwada, Indore",
    "capacity": 200,
}


def make_client(**overrides):
    settings = Settings(**{"NOTIFY_ON_NEW_RELIEF_POINTS": False, **overrides})
    container = build_container(settings)
    return TestClient(create_app(settings, container=container))


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def signed_in(client):
    client.post("/session/users", json=VICTIM)
    client.post(f"/session/sign-in/{VICTIM['id']}")
    return client


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["relief_points"] == 0


def test_relief_point_crud(client):
    created = client.post("/relief-points", json=KITCHEN)
    assert created.status_code == 201
    assert created.json()["id"] == "rp-kitchen"

    assert client.post("/relief-points", json=KITCHEN).status_code == 409

    patched = client.patch("/relief-points/rp-kitchen", json={"capacity": 0})
    assert patched.status_code == 200
    assert patched.json()["capacity"] == 0
    assert patched.json()["title"] == "Community Kitchen"

    assert client.delete("/relief-points/rp-kitchen").status_code == 200
    assert client.get("/relief-points/rp-kitchen").status_code == 404
    assert client.patch("/relief-points/rp-kitchen", json={"capacity": 3}).status_code == 404


def test_invalid_coordinate_is_rejected(client):
    bad = dict(KITCHEN, location={"latitude": 95.0, "longitude": 75.85})

    response = client.post("/relief-points", json=bad)

    assert response.status_code == 422
    assert client.get("/relief-points").json() == []


def test_filter_search_and_nearby(client):
    client.post("/relief-points", json=KITCHEN)
    client.post("/relief-points", json=dict(
        KITCHEN, id="rp-camp", title="Medical Camp", category="medical",
        description="", location={"latitude": 22.7533, "longitude": 75.8937},
    ))

    assert [p["id"] for p in client.get("/relief-points", params={"category": "medical"}).json()] == ["rp-camp"]
    assert [p["id"] for p in client.get("/relief-points/search", params={"q": "rajwada"}).json()] == [
        "rp-kitchen",
        "rp-camp",
    ]

    nearby = client.get("/relief-points/nearby", params={"lat": 22.7196, "lon": 75.8577, "radius": 1000}).json()
    assert [n["point"]["id"] for n in nearby] == ["rp-kitchen"]
    assert nearby[0]["distance"].endswith(" m")


def test_notifications_unread_badge(client):
    ids = [
        client.post("/notifications", json={"title": f"Alert {i}", "channel": "emergency"}).json()["id"]
        for i in range(3)
    ]

    first = client.post(f"/notifications/{ids[0]}/read").json()
    again = client.post(f"/notifications/{ids[0]}/read").json()

    assert first == {"id": ids[0], "changed": True, "unread": 2}
    assert again["changed"] is False
    assert client.get("/notifications/unread-count").json() == {"unread": 2}
    assert client.post("/notifications/read-all").json() == {"marked": 2, "unread": 0}


def test_notification_errors(client):
    bad_channel = client.post("/notifications", json={"title": "Hi", "channel": "carrier-pigeon"})

    assert bad_channel.status_code == 422
    assert client.post("/notifications/missing/read").status_code == 404


def test_new_relief_point_is_announced():
    client = make_client(NOTIFY_ON_NEW_RELIEF_POINTS=True)

    client.post("/relief-points", json=KITCHEN)

    alerts = client.get("/notifications", params={"channel": "relief-update"}).json()
    assert [a["title"] for a in alerts] == ["New relief point: Community Kitchen"]


def test_generate_without_user_is_empty(client):
    assert client.post("/recommendations/generate").json() == []


def test_recommendation_flow(signed_in):
    signed_in.post("/relief-points", json=KITCHEN)

    recs = signed_in.post("/recommendations/generate").json()
    ids = [r["id"] for r in recs]
    sos_id = synthetic_recommendation_id("victim", "sos")
    assert ids[0] == sos_id
    assert "relief-rp-kitchen" in ids

    feedback = signed_in.post("/recommendations/feedback", json={"category": "food", "positive": False}).json()
    assert feedback == {"category": "food", "weight": pytest.approx(0.95)}

    dismissed = signed_in.post("/recommendations/relief-rp-kitchen/dismiss")
    assert dismissed.status_code == 200
    assert "relief-rp-kitchen" not in [r["id"] for r in signed_in.get("/recommendations").json()]
    assert "relief-rp-kitchen" not in [r["id"] for r in signed_in.post("/recommendations/generate").json()]

    insights = signed_in.get("/recommendations/insights").json()
    assert insights["resourceAvailability"]["food"]["available"] == 1


def test_header_selects_acting_user(client):
    client.post("/session/users", json=VICTIM)

    recs = client.post("/recommendations/generate", headers={"X-User-ID": VICTIM["id"]}).json()

    assert recs
    assert client.post("/recommendations/generate", headers={"X-User-ID": "nobody"}).json() == []


def test_sign_out_clears_dismissals(signed_in):
    sos_id = synthetic_recommendation_id("victim", "sos")
    signed_in.post("/recommendations/generate")
    signed_in.post(f"/recommendations/{sos_id}/dismiss")

    signed_in.post("/session/sign-out")
    signed_in.post(f"/session/sign-in/{VICTIM['id']}")

    assert sos_id in [r["id"] for r in signed_in.post("/recommendations/generate").json()]


def test_user_required_endpoints(client):
    assert client.post("/recommendations/feedback", json={"category": "food", "positive": True}).status_code == 401
    assert client.post("/recommendations/abc/dismiss").status_code == 401
    assert client.get("/recommendations/insights").status_code == 401
    assert client.post("/session/sign-in/ghost").status_code == 404


def test_location_permission_denied_without_fallback():
    settings = Settings(NOTIFY_ON_NEW_RELIEF_POINTS=False)
    source = StaticLocationSource(error=LocationErrorKind.PERMISSION_DENIED)
    client = TestClient(create_app(settings, container=build_container(settings, location_source=source)))
    client.post("/session/users", json=dict(VICTIM, location=None))

    response = client.post("/recommendations/generate", headers={"X-User-ID": VICTIM["id"]})

    assert response.status_code == 403
    assert response.json()["kind"] == "permission_denied"


def test_seed_file_loads_relief_points(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text('{"relief_points": [{"id": "rp-1", "title": "Shelter", "category": "shelter", '
                    '"location": {"latitude": 22.72, "longitude": 75.86}}]}')
    container = build_container(Settings(NOTIFY_ON_NEW_RELIEF_POINTS=False))

    assert load_seed_file(container, str(seed)) == 1
    assert load_seed_file(container, str(tmp_path / "missing.json")) == 0
    assert container.relief_points.get("rp-1").title == "Shelter"
