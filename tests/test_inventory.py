import pytest

from medidispense.core.config import settings
from medidispense.core.exceptions import BusinessLogicError, NotFoundError
from medidispense.domain.inventory.service import InventoryService


@pytest.fixture
async def inventory_service(db_session):
    """Inventory service fixture"""
    return InventoryService(db_session)


def describe(inventory):
    return [(s.position, s.medicine, s.stock, s.capacity) for s in inventory.slots]


@pytest.mark.inventory
class TestInventoryService:

    async def test_first_access_seeds_defaults(self, inventory_service):
        inventory = await inventory_service.get_inventory()

        assert describe(inventory) == [
            (1, "Paracetamol", 100, 100),
            (2, "Azithromycin", 100, 100),
            (3, "Revital", 100, 100),
        ]

    async def test_seeding_happens_once(self, inventory_service):
        first = await inventory_service.get_inventory()
        second = await inventory_service.get_inventory()

        assert first.id == second.id
        assert len(second.slots) == 3

    async def test_add_slot_appends_at_next_position(self, inventory_service):
        inventory = await inventory_service.add_slot("Ibuprofen", stock=20, capacity=50)

        assert describe(inventory)[-1] == (4, "Ibuprofen", 20, 50)

    async def test_add_slot_uses_default_capacity(self, inventory_service):
        inventory = await inventory_service.add_slot("Ibuprofen")

        assert describe(inventory)[-1] == (4, "Ibuprofen", 0, settings.DEFAULT_SLOT_CAPACITY)

    async def test_add_slot_clamps_values(self, inventory_service):
        inventory = await inventory_service.add_slot("Ibuprofen", stock=500, capacity=40)
        assert describe(inventory)[-1] == (4, "Ibuprofen", 40, 40)

        inventory = await inventory_service.add_slot("Cetirizine", stock=-3, capacity=0)
        assert describe(inventory)[-1] == (5, "Cetirizine", 0, 1)

    async def test_slot_limit(self, inventory_service):
        for i in range(settings.MAX_SLOTS - 3):
            await inventory_service.add_slot(f"Medicine {i}")

        with pytest.raises(BusinessLogicError) as exc_info:
            await inventory_service.add_slot("One too many")

        assert exc_info.value.message == "Max servos is 12"
        inventory = await inventory_service.get_inventory()
        assert len(inventory.slots) == settings.MAX_SLOTS

    async def test_update_slot_keeps_unset_fields(self, inventory_service):
        inventory = await inventory_service.update_slot(2, stock=30)

        assert describe(inventory)[1] == (2, "Azithromycin", 30, 100)

    async def test_update_slot_clamps_to_new_capacity(self, inventory_service):
        inventory = await inventory_service.update_slot(1, capacity=60)

        assert describe(inventory)[0] == (1, "Paracetamol", 60, 60)

    async def test_update_missing_slot(self, inventory_service):
        with pytest.raises(NotFoundError):
            await inventory_service.update_slot(9, stock=1)

    async def test_remove_slot_renumbers(self, inventory_service):
        await inventory_service.add_slot("Ibuprofen", stock=10)

        inventory = await inventory_service.remove_slot(2)

        assert describe(inventory) == [
            (1, "Paracetamol", 100, 100),
            (2, "Revital", 100, 100),
            (3, "Ibuprofen", 10, 100),
        ]

    async def test_remove_missing_slot(self, inventory_service):
        with pytest.raises(NotFoundError):
            await inventory_service.remove_slot(4)


@pytest.mark.inventory
@pytest.mark.integration
class TestInventoryEndpoints:

    async def test_get_inventory(self, client):
        response = await client.get("/api/v1/inventory")

        assert response.status_code == 200
        servos = response.json()["servos"]
        assert [s["medicine"] for s in servos] == ["Paracetamol", "Azithromycin", "Revital"]
        assert [s["position"] for s in servos] == [1, 2, 3]

    async def test_add_update_remove(self, client):
        added = await client.post("/api/v1/inventory/servos", json={"medicine": "Ibuprofen", "stock": 15})
        updated = await client.put("/api/v1/inventory/servos/4", json={"stock": 25})
        removed = await client.delete("/api/v1/inventory/servos/1")

        assert added.status_code == 201
        assert added.json()["servos"][-1]["medicine"] == "Ibuprofen"
        assert updated.json()["servos"][-1]["stock"] == 25
        assert removed.status_code == 200
        assert [s["medicine"] for s in removed.json()["servos"]] == ["Azithromycin", "Revital", "Ibuprofen"]

    async def test_slot_limit_is_400(self, client):
        for i in range(settings.MAX_SLOTS - 3):
            await client.post("/api/v1/inventory/servos", json={"medicine": f"Medicine {i}"})

        response = await client.post("/api/v1/inventory/servos", json={"medicine": "Extra"})

        assert response.status_code == 400
        assert response.json()["message"] == "Max servos is 12"

    async def test_unknown_slot_is_404(self, client):
        response = await client.put("/api/v1/inventory/servos/42", json={"stock": 1})

        assert response.status_code == 404
        assert response.json()["message"] == "Servo not found"

    async def test_blank_medicine_is_400(self, client):
        response = await client.post("/api/v1/inventory/servos", json={"medicine": ""})

        assert response.status_code == 400
