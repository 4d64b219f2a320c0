"""End-to-end HTTP tests for the waste record review workflow."""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from wastelog.core.security import get_password_hash
from wastelog.db import session as db_session
from wastelog.db.base import Base
from wastelog.main import app
from wastelog.models import Branch, User, WasteRecord


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = db_session.build_engine(f"sqlite:///{tmp_path / 'review_flow.db'}")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    return testing_session_local


def _seed(session_local) -> dict[str, int]:
    with session_local() as db:
        north = Branch(name="North", location="Harbour Street 1")
        south = Branch(name="South", location="Market Square 9")
        db.add_all([north, south])
        db.flush()
        db.add_all(
            [
                User(username="boss", password_hash=get_password_hash("pass"), role="ELEVATED", is_active=True),
                User(
                    username="anna",
                    password_hash=get_password_hash("pass"),
                    role="SCOPED",
                    branch_id=north.id,
                    is_active=True,
                ),
                User(
                    username="sam",
                    password_hash=get_password_hash("pass"),
                    role="SCOPED",
                    branch_id=south.id,
                    is_active=True,
                ),
            ]
        )
        db.commit()
        return {"north": north.id, "south": south.id}


def _auth_headers(client: TestClient, username: str) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"username": username, "password": "pass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _record_payload(branch_id: int | None = None) -> dict:
    payload = {
        "itemName": "Tomatoes",
        "quantity": "5",
        "unit": "kg",
        "value": "12.50",
        "reasonCode": "SPOILAGE",
        "occurredAt": "2026-01-15",
    }
    if branch_id is not None:
        payload["branchId"] = branch_id
    return payload


def test_scoped_update_waits_for_approval(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    branches = _seed(session_local)

    with TestClient(app) as client:
        boss = _auth_headers(client, "boss")
        anna = _auth_headers(client, "anna")

        created = client.post("/api/v1/waste-records", json={"payload": _record_payload(branches["north"])}, headers=boss)
        assert created.status_code == 201
        record_id = created.json()["record"]["id"]

        staged = client.put(
            f"/api/v1/waste-records/{record_id}",
            json={"payload": {"quantity": "3"}, "justification": "Recounted at close"},
            headers=anna,
        )
        assert staged.status_code == 202
        body = staged.json()
        assert body["applied_directly"] is False
        review_id = body["review_request"]["id"]
        assert body["review_request"]["status"] == "PENDING"

        unchanged = client.get(f"/api/v1/waste-records/{record_id}", headers=anna)
        assert unchanged.json()["quantity"] == "5.000"

        detail = client.get(f"/api/v1/reviews/{review_id}", headers=boss)
        assert detail.status_code == 200
        assert detail.json()["changes"] == {"quantity": {"before": "5.000", "after": "3.000"}}

        decision = client.post(
            f"/api/v1/reviews/{review_id}/decision",
            json={"decision": "APPROVE", "notes": "Matches the bin log"},
            headers=boss,
        )
        assert decision.status_code == 200
        assert decision.json()["review_request"]["status"] == "APPROVED"
        assert decision.json()["record"]["quantity"] == "3.000"

        again = client.post(
            f"/api/v1/reviews/{review_id}/decision",
            json={"decision": "REJECT", "notes": "Changed my mind"},
            headers=boss,
        )
        assert again.status_code == 409

        history = client.get(f"/api/v1/waste-records/{record_id}/history", headers=boss)
        assert [entry["action_type"] for entry in history.json()] == [
            "WASTE_CREATE",
            "REVIEW_SUBMIT",
            "WASTE_UPDATE",
            "REVIEW_APPROVE",
        ]


def test_scoped_create_is_staged_until_approved(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    branches = _seed(session_local)

    with TestClient(app) as client:
        boss = _auth_headers(client, "boss")
        anna = _auth_headers(client, "anna")

        staged = client.post("/api/v1/waste-records", json={"payload": _record_payload()}, headers=anna)
        assert staged.status_code == 202
        review_id = staged.json()["review_request"]["id"]
        assert client.get("/api/v1/waste-records", headers=anna).json() == []

        pending = client.get("/api/v1/reviews", params={"status": "PENDING"}, headers=anna)
        assert [row["id"] for row in pending.json()] == [review_id]

        decision = client.post(
            f"/api/v1/reviews/{review_id}/decision",
            json={"decision": "APPROVE", "notes": "ok"},
            headers=boss,
        )
        assert decision.status_code == 200

        records = client.get("/api/v1/waste-records", headers=anna).json()
        assert len(records) == 1
        assert records[0]["branch_id"] == branches["north"]


def test_duplicate_pending_request_returns_conflict(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    branches = _seed(session_local)

    with TestClient(app) as client:
        boss = _auth_headers(client, "boss")
        anna = _auth_headers(client, "anna")
        record_id = client.post(
            "/api/v1/waste-records", json={"payload": _record_payload(branches["north"])}, headers=boss
        ).json()["record"]["id"]

        first = client.request(
            "DELETE",
            f"/api/v1/waste-records/{record_id}",
            json={"justification": "Entered twice"},
            headers=anna,
        )
        second = client.put(
            f"/api/v1/waste-records/{record_id}",
            json={"payload": {"quantity": "4"}, "justification": "Recount"},
            headers=anna,
        )

    assert first.status_code == 202
    assert first.json()["review_request"]["action"] == "DELETE"
    assert second.status_code == 409

    with session_local() as db:
        assert db.scalar(select(WasteRecord).where(WasteRecord.id == record_id)) is not None


def test_scoped_actor_cannot_decide_or_see_other_branches(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    branches = _seed(session_local)

    with TestClient(app) as client:
        boss = _auth_headers(client, "boss")
        anna = _auth_headers(client, "anna")
        sam = _auth_headers(client, "sam")
        south_record = client.post(
            "/api/v1/waste-records", json={"payload": _record_payload(branches["south"])}, headers=boss
        ).json()["record"]["id"]
        staged = client.put(
            f"/api/v1/waste-records/{south_record}",
            json={"payload": {"value": "10.00"}, "justification": "Price list"},
            headers=sam,
        ).json()["review_request"]["id"]

        foreign_read = client.get(f"/api/v1/waste-records/{south_record}", headers=anna)
        foreign_review = client.get(f"/api/v1/reviews/{staged}", headers=anna)
        foreign_update = client.put(
            f"/api/v1/waste-records/{south_record}",
            json={"payload": {"value": "1.00"}, "justification": "Nope"},
            headers=anna,
        )
        self_approval = client.post(
            f"/api/v1/reviews/{staged}/decision",
            json={"decision": "APPROVE", "notes": "looks fine"},
            headers=sam,
        )

    assert foreign_read.status_code == 404
    assert foreign_review.status_code == 404
    assert foreign_update.status_code == 403
    assert self_approval.status_code == 403


def test_invalid_payload_and_missing_justification_return_422(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    branches = _seed(session_local)

    with TestClient(app) as client:
        boss = _auth_headers(client, "boss")
        anna = _auth_headers(client, "anna")
        bad_unit = client.post(
            "/api/v1/waste-records",
            json={"payload": {**_record_payload(branches["north"]), "unit": "tons"}},
            headers=boss,
        )
        record_id = client.post(
            "/api/v1/waste-records", json={"payload": _record_payload(branches["north"])}, headers=boss
        ).json()["record"]["id"]
        no_reason = client.delete(f"/api/v1/waste-records/{record_id}", headers=anna)

    assert bad_unit.status_code == 422
    assert no_reason.status_code == 422


def test_requests_without_token_are_rejected(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        response = client.get("/api/v1/waste-records")
        health = client.get("/health")

    assert response.status_code in {401, 403}
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
