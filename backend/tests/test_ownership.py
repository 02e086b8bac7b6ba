import pytest
import sys
import os
import uuid
from sqlalchemy.exc import IntegrityError

# Add the parent directory to sys.path to allow imports from startup_hub
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from startup_hub.models import OwnershipClaim
from startup_hub.services import ownership
from startup_hub.services.exceptions import ConflictError
from conftest import make_claim, make_startup


def approved_claims(db, startup):
    return db.query(OwnershipClaim).filter(
        OwnershipClaim.startup_id == startup.id,
        OwnershipClaim.approved.is_(True),
    ).count()


def test_claim_requires_entrepreneur(client, db, investor, admin):
    startup = make_startup(db)
    assert client.post(f"/api/startups/{startup.id}/claim").status_code == 401
    for user in (investor, admin):
        response = client.post(f"/api/startups/{startup.id}/claim", headers=user.headers)
        assert response.status_code == 403
    assert db.query(OwnershipClaim).count() == 0


def test_claim_missing_or_unpublished_startup(client, db, entrepreneur):
    response = client.post(f"/api/startups/{uuid.uuid4()}/claim", headers=entrepreneur.headers)
    assert response.status_code == 404

    hidden = make_startup(db, "Hidden Startup", is_approved=False)
    response = client.post(f"/api/startups/{hidden.id}/claim", headers=entrepreneur.headers)
    assert response.status_code == 400


def test_claim_creates_pending_claim(client, db, entrepreneur):
    startup = make_startup(db)
    response = client.post(f"/api/startups/{startup.id}/claim", headers=entrepreneur.headers)
    assert response.status_code == 201
    data = response.json()
    assert data["approved"] is False
    assert data["status"] == "pending"
    assert data["user_id"] == str(entrepreneur.user_id)
    assert data["startup_id"] == str(startup.id)


def test_duplicate_claim_names_existing_claim(client, db, entrepreneur):
    startup = make_startup(db)
    first = client.post(f"/api/startups/{startup.id}/claim", headers=entrepreneur.headers).json()

    response = client.post(f"/api/startups/{startup.id}/claim", headers=entrepreneur.headers)
    assert response.status_code == 409
    body = response.json()
    assert body["detail"] == "You have already claimed this startup"
    assert body["existing_claim"] == {"id": first["id"], "startup_id": str(startup.id), "status": "pending"}
    assert db.query(OwnershipClaim).count() == 1


def test_claim_blocked_when_startup_has_approved_owner(client, db, make_user):
    startup = make_startup(db)
    owner = make_user("entrepreneur")
    make_claim(db, owner.user_id, startup, approved=True)

    other = make_user("entrepreneur")
    response = client.post(f"/api/startups/{startup.id}/claim", headers=other.headers)
    assert response.status_code == 409
    assert response.json()["detail"] == "This startup already has an approved owner"


def test_two_entrepreneurs_claim_then_admin_approves_one(client, db, admin, make_user):
    startup = make_startup(db)
    entrepreneur_a = make_user("entrepreneur")
    entrepreneur_b = make_user("entrepreneur")

    claim_a = client.post(f"/api/startups/{startup.id}/claim", headers=entrepreneur_a.headers)
    claim_b = client.post(f"/api/startups/{startup.id}/claim", headers=entrepreneur_b.headers)
    assert claim_a.status_code == 201
    assert claim_b.status_code == 201

    response = client.post(f"/api/admin/claims/{claim_a.json()['id']}/approve", headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = client.post(f"/api/admin/claims/{claim_b.json()['id']}/approve", headers=admin.headers)
    assert response.status_code == 409
    assert "already has an approved owner" in response.json()["detail"]
    assert approved_claims(db, startup) == 1


def test_approving_twice_is_a_conflict(client, db, admin, entrepreneur):
    startup = make_startup(db)
    claim = make_claim(db, entrepreneur.user_id, startup)
    assert client.post(f"/api/admin/claims/{claim.id}/approve", headers=admin.headers).status_code == 200
    response = client.post(f"/api/admin/claims/{claim.id}/approve", headers=admin.headers)
    assert response.status_code == 409
    assert response.json()["detail"] == "This claim is already approved"


def test_approve_missing_claim(client, admin):
    assert client.post(f"/api/admin/claims/{uuid.uuid4()}/approve", headers=admin.headers).status_code == 404


def test_claim_admin_routes_require_admin(client, db, entrepreneur):
    startup = make_startup(db)
    claim = make_claim(db, entrepreneur.user_id, startup)
    assert client.post(f"/api/admin/claims/{claim.id}/approve", headers=entrepreneur.headers).status_code == 403
    assert client.delete(f"/api/admin/claims/{claim.id}", headers=entrepreneur.headers).status_code == 403
    assert client.get("/api/admin/claims", headers=entrepreneur.headers).status_code == 403


def test_approved_claim_index_rejects_second_approved_owner(db, make_user):
    startup = make_startup(db)
    make_claim(db, make_user("entrepreneur").user_id, startup, approved=True)

    db.add(OwnershipClaim(user_id=make_user("entrepreneur").user_id, startup_id=startup.id, approved=True))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    assert approved_claims(db, startup) == 1


def test_pair_constraint_rejects_duplicate_claim(db, entrepreneur):
    startup = make_startup(db)
    make_claim(db, entrepreneur.user_id, startup)

    db.add(OwnershipClaim(user_id=entrepreneur.user_id, startup_id=startup.id))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_concurrent_approvals_exactly_one_succeeds(db, admin, make_user, monkeypatch):
    startup = make_startup(db)
    claim_a = make_claim(db, make_user("entrepreneur").user_id, startup)
    claim_b = make_claim(db, make_user("entrepreneur").user_id, startup)

    # Both approvals pass the read-before-write check, as two simultaneous requests would
    monkeypatch.setattr(ownership, "approved_owner", lambda db, startup_id: None)

    results = []
    for claim in (claim_a, claim_b):
        try:
            ownership.approve_claim(db, admin.auth, claim.id)
            results.append("approved")
        except ConflictError as e:
            results.append(e.message)

    assert results == ["approved", "This startup already has an approved owner"]
    assert approved_claims(db, startup) == 1


def test_reject_claim_deletes_it(client, db, admin, entrepreneur):
    startup = make_startup(db)
    claim = make_claim(db, entrepreneur.user_id, startup)

    response = client.delete(f"/api/admin/claims/{claim.id}", headers=admin.headers)
    assert response.status_code == 200
    assert db.query(OwnershipClaim).count() == 0

    assert client.delete(f"/api/admin/claims/{claim.id}", headers=admin.headers).status_code == 404


def test_list_claims(client, db, admin, make_user):
    first = make_startup(db, "First Startup")
    second = make_startup(db, "Second Startup")
    make_claim(db, make_user("entrepreneur").user_id, first, approved=True)
    make_claim(db, make_user("entrepreneur").user_id, second)

    response = client.get("/api/admin/claims", headers=admin.headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {c["startup_slug"] for c in data["claims"]} == {"first-startup", "second-startup"}

    response = client.get("/api/admin/claims", params={"approved": "false"}, headers=admin.headers)
    claims = response.json()["claims"]
    assert len(claims) == 1
    assert claims[0]["startup_name"] == "Second Startup"
    assert claims[0]["status"] == "pending"


def test_my_startup(client, db, entrepreneur):
    response = client.get("/api/me/startup", headers=entrepreneur.headers)
    assert response.json() == {"claim": None, "startup": None}

    startup = make_startup(db)
    claim = make_claim(db, entrepreneur.user_id, startup)
    data = client.get("/api/me/startup", headers=entrepreneur.headers).json()
    assert data["claim"]["status"] == "pending"
    assert data["startup"] is None

    claim.approved = True
    db.commit()
    data = client.get("/api/me/startup", headers=entrepreneur.headers).json()
    assert data["claim"]["status"] == "approved"
    assert data["startup"]["slug"] == startup.slug


def test_deleting_startup_cascades_claims(client, db, admin, entrepreneur):
    startup = make_startup(db)
    make_claim(db, entrepreneur.user_id, startup, approved=True)

    response = client.delete(f"/api/admin/startups/{startup.id}", headers=admin.headers)
    assert response.status_code == 200
    assert db.query(OwnershipClaim).count() == 0
