import pytest
import sys
import os
import csv
import io
import re
import uuid
from datetime import date

# Add the parent directory to sys.path to allow imports from startup_hub
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from startup_hub.models import OwnershipClaim, Startup
from startup_hub.services.export import CSV_HEADERS, export_filename, render_csv
from conftest import make_claim, make_startup, make_submission, submission_form

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# Startup management

def test_admin_creates_published_startup(client, db, admin, logo_storage):
    form = submission_form(name="Direct Entry")
    del form["submitter_email"]
    response = client.post(
        "/api/admin/startups",
        data=form,
        files={"logo": ("brand.svg", b"<svg/>", "image/svg+xml")},
        headers=admin.headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["slug"] == "direct-entry"
    assert data["is_approved"] is True
    assert data["created_by"] == str(admin.user_id)

    [logo_key] = logo_storage.objects
    assert re.fullmatch(r"startups/\d{13}-direct-entry\.svg", logo_key)
    assert data["logo_url"].endswith(logo_key)
    assert client.get("/api/startups/direct-entry").status_code == 200


def test_admin_creates_startup_without_files_when_storage_is_down(storage_down, db, admin):
    response = storage_down.post("/api/admin/startups", data=submission_form(name="Offline Entry"),
                                 headers=admin.headers)
    assert response.status_code == 201
    assert response.json()["slug"] == "offline-entry"
    assert db.query(Startup).count() == 1


def test_admin_create_slug_conflict(client, db, admin, logo_storage):
    existing = make_startup(db, "Direct Entry")
    response = client.post(
        "/api/admin/startups",
        data=submission_form(name="Direct   Entry"),
        files={"logo": ("brand.png", PNG_BYTES, "image/png")},
        headers=admin.headers,
    )
    assert response.status_code == 409
    assert response.json()["existing_startup"]["id"] == str(existing.id)
    assert logo_storage.objects == {}
    assert db.query(Startup).count() == 1


def test_admin_create_validation_and_roles(client, admin, entrepreneur):
    response = client.post("/api/admin/startups", data=submission_form(tags="[]"), headers=admin.headers)
    assert response.status_code == 400
    assert "tags" in response.json()["errors"]

    response = client.post("/api/admin/startups", data=submission_form(), headers=entrepreneur.headers)
    assert response.status_code == 403


def test_admin_lists_all_startups(client, db, admin, entrepreneur):
    make_startup(db, "Published")
    make_startup(db, "Unpublished", is_approved=False)
    response = client.get("/api/admin/startups", headers=admin.headers)
    assert response.status_code == 200
    data = response.json()
    assert [s["name"] for s in data] == ["Unpublished", "Published"]
    assert data[0]["email"] == "contact@acme.example.com"

    assert client.get("/api/admin/startups", headers=entrepreneur.headers).status_code == 403


def test_admin_deletes_startup(client, db, admin):
    startup = make_startup(db)
    assert client.delete(f"/api/admin/startups/{startup.id}", headers=admin.headers).status_code == 200
    assert db.query(Startup).count() == 0
    assert client.delete(f"/api/admin/startups/{startup.id}", headers=admin.headers).status_code == 404


# CSV export

def test_export_csv(client, db, admin):
    make_startup(db, "Older Co", tags=["Fintech", "SaaS"], is_approved=False)
    make_startup(db, 'Quote "Q" Labs', short_description='Says "hello" to, commas')

    response = client.get("/api/admin/startups/export", headers=admin.headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "text/csv; charset=utf-8"
    assert response.headers["content-disposition"] == f'attachment; filename="startups_{date.today().isoformat()}.csv"'

    assert '"Quote ""Q"" Labs"' in response.text
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == CSV_HEADERS
    newest, oldest = rows[1], rows[2]
    assert newest[1] == 'Quote "Q" Labs'
    assert newest[3] == 'Says "hello" to, commas'
    assert newest[16] == "Yes"
    assert oldest[1] == "Older Co"
    assert oldest[9] == "Fintech; SaaS"
    assert oldest[16] == "No"


def test_export_requires_admin(client, investor):
    assert client.get("/api/admin/startups/export").status_code == 401
    assert client.get("/api/admin/startups/export", headers=investor.headers).status_code == 403


def test_export_filename():
    assert export_filename(date(2025, 3, 9)) == "startups_2025-03-09.csv"


def test_render_csv_empty():
    assert render_csv([]).splitlines() == [",".join(f'"{header}"' for header in CSV_HEADERS)]


# Dashboard

def test_admin_stats(client, db, admin, identity):
    identity.add_user(admin.user_id, admin.email, role="admin")
    identity.add_user(uuid.uuid4(), "eva@example.com")
    make_startup(db, "One")
    make_startup(db, "Two", is_approved=False)
    for i in range(6):
        make_submission(db, f"Pending {i}")
    make_submission(db, "Done", status="approved")

    response = client.get("/api/admin/stats", headers=admin.headers)
    assert response.status_code == 200
    data = response.json()
    assert data["pending_submissions"] == 6
    assert data["total_startups"] == 2
    assert data["total_users"] == 2
    assert [s["name"] for s in data["recent_submissions"]] == [f"Pending {i}" for i in range(5, 0, -1)]


# Users

def test_list_users(client, admin, entrepreneur, identity):
    identity.add_user(uuid.uuid4(), "ana@example.com", role="investor", full_name="Ana", company="Fondo Uno")
    identity.add_user(uuid.uuid4(), "nobody@example.com")

    response = client.get("/api/admin/users", headers=admin.headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    by_email = {u["email"]: u for u in data["users"]}
    assert by_email["ana@example.com"]["role"] == "investor"
    assert by_email["ana@example.com"]["company"] == "Fondo Uno"
    assert by_email["nobody@example.com"]["role"] == "entrepreneur"

    assert client.get("/api/admin/users", headers=entrepreneur.headers).status_code == 403


def test_update_user_role(client, admin, identity):
    user_id = uuid.uuid4()
    identity.add_user(user_id, "eva@example.com", role="entrepreneur", company="Huerta")

    response = client.patch(f"/api/admin/users/{user_id}", json={"role": "investor", "full_name": "Eva"},
                            headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["role"] == "investor"
    assert identity.users[str(user_id)]["user_metadata"] == {
        "role": "investor", "full_name": "Eva", "company": "Huerta",
    }


def test_update_user_errors(client, admin, identity):
    user_id = uuid.uuid4()
    identity.add_user(user_id, "eva@example.com")
    identity.add_user(admin.user_id, admin.email, role="admin")

    response = client.patch(f"/api/admin/users/{user_id}", json={"role": "owner"}, headers=admin.headers)
    assert response.status_code == 400

    response = client.patch(f"/api/admin/users/{uuid.uuid4()}", json={"role": "investor"}, headers=admin.headers)
    assert response.status_code == 404

    response = client.patch(f"/api/admin/users/{admin.user_id}", json={"role": "investor"}, headers=admin.headers)
    assert response.status_code == 400
    assert identity.users[str(admin.user_id)]["user_metadata"]["role"] == "admin"

    response = client.patch(f"/api/admin/users/{admin.user_id}", json={"full_name": "Boss"}, headers=admin.headers)
    assert response.status_code == 200


def test_delete_user_removes_claims(client, db, admin, identity, make_user):
    owner = make_user("entrepreneur")
    identity.add_user(owner.user_id, owner.email)
    startup = make_startup(db)
    make_claim(db, owner.user_id, startup, approved=True)
    other_claim = make_claim(db, make_user("entrepreneur").user_id, make_startup(db, "Other"))

    response = client.delete(f"/api/admin/users/{owner.user_id}", headers=admin.headers)
    assert response.status_code == 200
    assert str(owner.user_id) not in identity.users
    assert [c.id for c in db.query(OwnershipClaim).all()] == [other_claim.id]


def test_delete_user_errors(client, admin, entrepreneur, identity):
    identity.add_user(admin.user_id, admin.email, role="admin")
    response = client.delete(f"/api/admin/users/{admin.user_id}", headers=admin.headers)
    assert response.status_code == 400
    assert str(admin.user_id) in identity.users

    assert client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=admin.headers).status_code == 404
    assert client.delete(f"/api/admin/users/{uuid.uuid4()}", headers=entrepreneur.headers).status_code == 403
