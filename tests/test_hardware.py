import pytest
from httpx import AsyncClient

from tests.conftest import TAG, add_pending_pair, sample_prescription


@pytest.mark.integration
class TestHardwareEndpoints:
    """Endpoints polled by the dispenser device."""

    async def test_device_view_includes_patient_name(self, client: AsyncClient, test_patient) -> None:
        await client.post("/api/v1/prescriptions", json={"tag_id": TAG, **sample_prescription()})

        response = await client.get(f"/api/v1/hardware/{TAG}")

        assert response.status_code == 200
        data = response.json()
        assert data["patient_name"] == "John Doe"
        assert (data["paracetamol"], data["azithromycin"], data["revital"]) == (2, 1, 0)
        assert data["frequency"] == "Twice daily"
        assert data["status"] == "Pending"

    async def test_device_view_for_unregistered_tag(self, client: AsyncClient) -> None:
        await client.post("/api/v1/prescriptions", json={"tag_id": "LOOSE-TAG", **sample_prescription()})

        response = await client.get("/api/v1/hardware/LOOSE-TAG")

        assert response.json()["patient_name"] == "Unknown Patient"

    async def test_device_view_without_pending(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/hardware/{TAG}")

        assert response.status_code == 404
        assert response.json()["message"] == "No pending prescription found for this RFID"

    async def test_acknowledge_dispensed(self, client: AsyncClient, test_patient) -> None:
        await client.post("/api/v1/prescriptions", json={"tag_id": TAG, **sample_prescription()})

        response = await client.put(f"/api/v1/hardware/dispensed/{TAG}")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Prescription marked as dispensed"
        assert data["status"] == "Dispensed"
        assert data["last_dispensed"] is not None

        logs = (await client.get("/api/v1/logs")).json()
        assert len(logs) == 1
        assert logs[0]["status"] == "Success"
        assert logs[0]["patient_name"] == "John Doe"
        assert (await client.get(f"/api/v1/hardware/{TAG}")).status_code == 404

    async def test_acknowledge_without_pending_logs_failure(self, client: AsyncClient) -> None:
        response = await client.put(f"/api/v1/hardware/dispensed/{TAG}")

        assert response.status_code == 404
        logs = (await client.get("/api/v1/logs")).json()
        assert [entry["status"] for entry in logs] == ["Failure"]

    async def test_device_sees_latest_pending_first(self, client: AsyncClient, db_session) -> None:
        """With two Pending rows for a tag, the newest is served and acknowledged first."""
        await add_pending_pair(db_session)

        first = await client.get(f"/api/v1/hardware/{TAG}")
        ack = await client.put(f"/api/v1/hardware/dispensed/{TAG}")
        second = await client.get(f"/api/v1/hardware/{TAG}")

        assert first.json()["frequency"] == "Twice daily"
        assert first.json()["paracetamol"] == 2
        assert ack.status_code == 200
        assert second.status_code == 200
        assert second.json()["frequency"] == "Once daily"
        assert second.json()["status"] == "Pending"
