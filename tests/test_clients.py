"""
Tests for client records: CRUD, search, audit entries and delete protection.
"""

import pytest
from sqlalchemy import select, func

from lawdesk.models import AuditLog
from tests.conftest import create_client_record, create_case_record


async def _audit_count(db) -> int:
    result = await db.execute(select(func.count()).select_from(AuditLog))
    return result.scalar_one()


# =============================================================================
# CREATE / READ
# =============================================================================

class TestCreateClient:
    async def test_create_returns_generated_fields(self, auth_client, test_user):
        data = await create_client_record(auth_client, name="Jane Doe", nationalId="ID-1")
        assert data["id"]
        assert data["name"] == "Jane Doe"
        assert data["nationalId"] == "ID-1"
        assert data["createdBy"] == test_user.id
        assert data["createdAt"]
        assert data["updatedAt"]

    async def test_create_writes_audit_entry(self, auth_client, db, test_user):
        data = await create_client_record(auth_client)

        result = await db.execute(select(AuditLog).where(AuditLog.action == "client_created"))
        entry = result.scalar_one()
        assert entry.record_id == data["id"]
        assert entry.user_id == test_user.id
        assert entry.table_name == "clients"
        assert entry.old_values is None
        assert '"Jane Doe"' in entry.new_values

    async def test_create_requires_name(self, auth_client):
        response = await auth_client.post("/api/clients", json={"email": "x@example.com"})
        assert response.status_code == 400

    async def test_create_rejects_blank_name(self, auth_client):
        response = await auth_client.post("/api/clients", json={"name": ""})
        assert response.status_code == 400

    async def test_get_client(self, auth_client):
        data = await create_client_record(auth_client)
        response = await auth_client.get(f"/api/clients/{data['id']}")
        assert response.status_code == 200
        assert response.json() == data

    async def test_get_missing_client(self, auth_client):
        response = await auth_client.get("/api/clients/does-not-exist")
        assert response.status_code == 404

    async def test_list_clients(self, auth_client):
        await create_client_record(auth_client, name="First")
        await create_client_record(auth_client, name="Second")
        response = await auth_client.get("/api/clients")
        assert response.status_code == 200
        assert {c["name"] for c in response.json()} == {"First", "Second"}


# =============================================================================
# SEARCH
# =============================================================================

class TestSearchClients:
    async def _seed(self, http):
        await create_client_record(http, name="Alice Martin", email="alice@firm.com", phone="111")
        await create_client_record(http, name="Bob Stone", email="bob@mail.com", phone="222-555")
        await create_client_record(http, name="Carol King", email="carol@firm.com", phone="333")

    async def test_search_by_name_ignores_case(self, auth_client):
        await self._seed(auth_client)
        response = await auth_client.get("/api/clients", params={"search": "aLiCe"})
        assert [c["name"] for c in response.json()] == ["Alice Martin"]

    async def test_search_matches_email_and_phone(self, auth_client):
        await self._seed(auth_client)
        by_email = await auth_client.get("/api/clients", params={"search": "firm.com"})
        assert {c["name"] for c in by_email.json()} == {"Alice Martin", "Carol King"}

        by_phone = await auth_client.get("/api/clients", params={"search": "555"})
        assert [c["name"] for c in by_phone.json()] == ["Bob Stone"]

    async def test_search_results_are_subset_of_list(self, auth_client):
        await self._seed(auth_client)
        everything = {c["id"] for c in (await auth_client.get("/api/clients")).json()}
        found = (await auth_client.get("/api/clients", params={"search": "o"})).json()
        assert found
        assert {c["id"] for c in found} <= everything
        for c in found:
            haystack = " ".join(filter(None, [c["name"], c["email"], c["phone"]])).lower()
            assert "o" in haystack

    async def test_search_treats_wildcards_literally(self, auth_client):
        await self._seed(auth_client)
        response = await auth_client.get("/api/clients", params={"search": "%"})
        assert response.json() == []


# =============================================================================
# UPDATE
# =============================================================================

class TestUpdateClient:
    async def test_partial_update(self, auth_client):
        data = await create_client_record(auth_client, phone="555-0100")
        response = await auth_client.put(f"/api/clients/{data['id']}", json={"phone": "555-9999"})
        assert response.status_code == 200
        updated = response.json()
        assert updated["phone"] == "555-9999"
        assert updated["name"] == data["name"]
        assert updated["updatedAt"] >= data["updatedAt"]

    async def test_update_writes_old_and_new_values(self, auth_client, db):
        import json
        data = await create_client_record(auth_client, phone="555-0100")
        await auth_client.put(f"/api/clients/{data['id']}", json={"phone": "555-9999"})

        result = await db.execute(select(AuditLog).where(AuditLog.action == "client_updated"))
        entry = result.scalar_one()
        assert json.loads(entry.old_values)["phone"] == "555-0100"
        assert json.loads(entry.new_values)["phone"] == "555-9999"

    async def test_update_missing_client_is_404_without_audit(self, auth_client, db):
        before = await _audit_count(db)
        response = await auth_client.put("/api/clients/does-not-exist", json={"name": "X"})
        assert response.status_code == 404
        assert await _audit_count(db) == before

    async def test_update_missing_client_checked_before_validation(self, auth_client):
        response = await auth_client.put("/api/clients/does-not-exist", json={"name": None})
        assert response.status_code == 404

    async def test_update_rejects_null_name(self, auth_client):
        data = await create_client_record(auth_client)
        response = await auth_client.put(f"/api/clients/{data['id']}", json={"name": None})
        assert response.status_code == 400


# =============================================================================
# DELETE
# =============================================================================

class TestDeleteClient:
    async def test_delete_then_get_is_404(self, auth_client, db):
        data = await create_client_record(auth_client)
        response = await auth_client.delete(f"/api/clients/{data['id']}")
        assert response.status_code == 204

        assert (await auth_client.get(f"/api/clients/{data['id']}")).status_code == 404

        result = await db.execute(select(AuditLog).where(AuditLog.action == "client_deleted"))
        assert result.scalar_one().record_id == data["id"]

    async def test_delete_missing_client(self, auth_client):
        response = await auth_client.delete("/api/clients/does-not-exist")
        assert response.status_code == 404

    async def test_delete_client_with_cases_conflicts(self, auth_client, test_user):
        data = await create_client_record(auth_client)
        await create_case_record(auth_client, data["id"], test_user.id)

        response = await auth_client.delete(f"/api/clients/{data['id']}")
        assert response.status_code == 409
        assert (await auth_client.get(f"/api/clients/{data['id']}")).status_code == 200
