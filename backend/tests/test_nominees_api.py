"""Tests for /api/nominees router endpoints."""

from __future__ import annotations

from conftest import make_nominee


def _create(client, headers, email="kin@example.com", tier="Limited"):
    return client.post("/api/nominees", json={
        "name": "Kin", "email": email, "relationship": "sibling", "access_level": tier,
    }, headers=headers)


class TestNomineeCRUD:
    def test_create_and_list(self, client, owner_headers):
        resp = _create(client, owner_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "Pending"
        assert "emergency_access_code" not in data

        listed = client.get("/api/nominees", headers=owner_headers)
        assert listed.status_code == 200
        assert [n["id"] for n in listed.json()] == [data["id"]]

    def test_duplicate_email_409(self, client, owner_headers):
        _create(client, owner_headers)
        resp = _create(client, owner_headers)
        assert resp.status_code == 409

    def test_invalid_tier_422(self, client, owner_headers):
        resp = _create(client, owner_headers, tier="Everything")
        assert resp.status_code == 422

    def test_get_update_delete(self, client, owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]

        got = client.get(f"/api/nominees/{nominee_id}", headers=owner_headers)
        assert got.status_code == 200

        updated = client.put(f"/api/nominees/{nominee_id}", json={
            "access_level": "DocumentsOnly",
        }, headers=owner_headers)
        assert updated.status_code == 200
        assert updated.json()["access_level"] == "DocumentsOnly"
        assert updated.json()["relationship"] == "sibling"

        deleted = client.delete(f"/api/nominees/{nominee_id}", headers=owner_headers)
        assert deleted.status_code == 200
        assert client.get(f"/api/nominees/{nominee_id}", headers=owner_headers).status_code == 404

    def test_other_owner_gets_403(self, client, owner_headers, other_owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]
        resp = client.get(f"/api/nominees/{nominee_id}", headers=other_owner_headers)
        assert resp.status_code == 403
        resp = client.post(f"/api/nominees/{nominee_id}/revoke", headers=other_owner_headers)
        assert resp.status_code == 403

    def test_missing_nominee_404(self, client, owner_headers):
        resp = client.post("/api/nominees/does-not-exist/activate", headers=owner_headers)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Nominee not found"


class TestNomineeLifecycle:
    def test_invite_keeps_status(self, client, owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]
        resp = client.post(f"/api/nominees/{nominee_id}/invite", headers=owner_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["code"]) == 8
        assert data["nominee"]["status"] == "Pending"

    def test_send_invitation_activates(self, client, owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]
        resp = client.post(f"/api/nominees/{nominee_id}/send-invitation", headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json()["nominee"]["status"] == "Active"

    def test_revoke_is_terminal(self, client, owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]
        assert client.post(
            f"/api/nominees/{nominee_id}/revoke", headers=owner_headers
        ).json()["status"] == "Revoked"
        assert client.post(
            f"/api/nominees/{nominee_id}/activate", headers=owner_headers
        ).status_code == 409
        assert client.post(
            f"/api/nominees/{nominee_id}/invite", headers=owner_headers
        ).status_code == 409


class TestNomineeReads:
    def test_access_log_lists_own_nominees(self, client, owner_headers):
        nominee_id = _create(client, owner_headers).json()["id"]
        client.post(f"/api/nominees/{nominee_id}/invite", headers=owner_headers)

        resp = client.get("/api/nominees/access-log", headers=owner_headers)
        assert resp.status_code == 200
        entries = resp.json()
        assert {e["nominee_id"] for e in entries} == {nominee_id}
        assert all(e["nominee_name"] == "Kin" for e in entries)
        assert len(entries) == 2

    def test_owners_lookup_uses_callers_own_email(
        self, client, session, owner, other_owner, owner_headers
    ):
        # other_owner named this owner as a nominee
        make_nominee(session, other_owner, owner.email)
        resp = client.get("/api/nominees/owners", headers=owner_headers)
        assert resp.status_code == 200
        assert [u["id"] for u in resp.json()] == [other_owner.id]

    def test_owners_lookup_ignores_foreign_email(
        self, client, session, owner, other_owner, owner_headers
    ):
        make_nominee(session, other_owner, "stranger@example.com")
        resp = client.get(
            "/api/nominees/owners",
            params={"email": "stranger@example.com"},
            headers=owner_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == []
