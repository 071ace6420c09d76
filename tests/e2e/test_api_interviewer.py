import pytest
from fastapi.testclient import TestClient

from api_server import create_app


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine=engine))


def _complete(client, email, name, answer):
    created = client.post(
        "/api/interviews",
        json={"candidateEmail": email, "candidateName": name, "candidatePhone": "555 0101", "interviewerId": "iv-1"},
    ).json()
    token = created["session"]["inviteToken"]
    client.post(f"/api/invite/{token}/resume", json={"resume": {"originalName": "cv.pdf"}})
    client.post(f"/api/invite/{token}/start")
    client.post(f"/api/invite/{token}/answers", json={"answer": answer, "durationMs": 1000})
    return client.post(f"/api/invite/{token}/complete").json()["session"]


def test_create_validates_email(client):
    resp = client.post("/api/interviews", json={"candidateEmail": "nope"})
    assert resp.status_code == 422


def test_list_sorted_by_score(client, clock):
    weak = _complete(client, "weak@example.com", "Weak Candidate", "no idea")
    clock.advance(60)
    strong = _complete(client, "strong@example.com", "Strong Candidate", "React " * 60)
    clock.advance(60)
    client.post("/api/interviews", json={"candidateEmail": "pending@example.com", "interviewerId": "iv-1"})

    listing = client.get("/api/interviews", params={"sort": "score", "order": "desc"}).json()["sessions"]
    assert [item["candidate"]["email"] for item in listing] == [
        "strong@example.com",
        "weak@example.com",
        "pending@example.com",
    ]
    assert listing[0]["finalScore"] == strong["finalScore"]
    assert listing[1]["finalScore"] == weak["finalScore"]
    assert listing[0]["questionCount"] == 6
    assert listing[2]["inviteUrl"].endswith(listing[2]["inviteToken"])


def test_search_and_detail(client):
    created = client.post("/api/interviews", json={"candidateEmail": "grace@navy.mil", "candidateName": "Grace Hopper"}).json()
    client.post("/api/interviews", json={"candidateEmail": "ada@example.com"})

    found = client.get("/api/interviews", params={"search": "hopper"}).json()["sessions"]
    assert [item["id"] for item in found] == [created["session"]["id"]]

    detail = client.get(f"/api/interviews/{created['session']['id']}")
    assert detail.status_code == 200
    assert detail.json()["session"]["candidate"]["name"] == "Grace Hopper"

    missing = client.get("/api/interviews/unknown-id")
    assert missing.status_code == 404


def test_expire_twice(client):
    created = client.post("/api/interviews", json={"candidateEmail": "ada@example.com"}).json()
    first = client.post(f"/api/interviews/{created['session']['id']}/expire")
    assert first.status_code == 200
    second = client.post(f"/api/interviews/{created['session']['id']}/expire")
    assert second.status_code == 410
