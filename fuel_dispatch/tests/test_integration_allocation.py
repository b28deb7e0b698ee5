import pytest

from fuel_dispatch.models.enums import TruckState
from fuel_dispatch.tests.conftest import reload


@pytest.mark.asyncio
async def test_allocation_lifecycle_over_http(async_client, async_db_session, test_assignment, test_truck, make_customer, admin_headers):
    assignment_id = test_assignment.id
    customer = await make_customer("Minera Andina")
    other = await make_customer()

    resp = await async_client.post(
        f"/assignments/{assignment_id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 400},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["allocatedQuantity"] == 400.0
    assert created["deliveredQuantity"] == 0.0
    assert created["status"] == "pending"
    entry_id = created["id"]

    resp = await async_client.post(
        f"/assignments/{assignment_id}/clients",
        json={"customerId": other.id, "allocatedQuantity": 700},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidQuantity"

    resp = await async_client.put(
        f"/assignments/{assignment_id}/clients/{entry_id}",
        json={"status": "completed"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["totalRemaining"] == 600.0
    assert body["assignmentCompleted"] is True
    assert body["pendingDeliveries"] == 0
    assert body["clientAllocation"]["deliveredQuantity"] == 400.0

    truck = await reload(async_db_session, test_truck)
    assert truck.state is TruckState.ACTIVE
    assert truck.last_remaining == 600.0


@pytest.mark.asyncio
async def test_list_allocations_includes_customer(async_client, test_assignment, make_customer, operator_headers, admin_headers):
    customer = await make_customer("Transportes Sur")
    await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 150},
        headers=admin_headers,
    )

    resp = await async_client.get(f"/assignments/{test_assignment.id}/clients", headers=operator_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["assignmentId"] == test_assignment.id
    assert body["clientAllocations"][0]["customer"]["companyName"] == "Transportes Sur"


@pytest.mark.asyncio
async def test_patch_records_in_progress(async_client, test_assignment, make_customer, admin_headers, operator_headers):
    customer = await make_customer()
    created = (await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 300},
        headers=admin_headers,
    )).json()

    resp = await async_client.patch(
        f"/assignments/{test_assignment.id}/clients/{created['id']}",
        json={"status": "in_progress", "meterStart": 1500.0},
        headers=operator_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["clientAllocation"]["status"] == "in_progress"
    assert resp.json()["clientAllocation"]["meterStart"] == 1500.0
    assert resp.json()["assignmentCompleted"] is False


@pytest.mark.asyncio
async def test_delete_pending_allocation(async_client, async_db_session, test_assignment, test_truck, make_customer, admin_headers):
    customer = await make_customer()
    created = (await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 300},
        headers=admin_headers,
    )).json()

    resp = await async_client.delete(f"/assignments/{test_assignment.id}/clients/{created['id']}", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["totalRemaining"] == 1000.0
    truck = await reload(async_db_session, test_truck)
    assert truck.state is TruckState.ACTIVE
    assert truck.last_remaining == 1000.0


@pytest.mark.asyncio
async def test_delete_in_progress_allocation_rejected(async_client, test_assignment, make_customer, admin_headers):
    assignment_id = test_assignment.id
    customer = await make_customer()
    created = (await async_client.post(
        f"/assignments/{assignment_id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 300},
        headers=admin_headers,
    )).json()
    await async_client.put(
        f"/assignments/{assignment_id}/clients/{created['id']}",
        json={"status": "in_progress"},
        headers=admin_headers,
    )

    resp = await async_client.delete(f"/assignments/{assignment_id}/clients/{created['id']}", headers=admin_headers)

    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidState"


@pytest.mark.asyncio
async def test_operator_cannot_delete(async_client, test_assignment, make_customer, admin_headers, operator_headers):
    customer = await make_customer()
    created = (await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 300},
        headers=admin_headers,
    )).json()

    resp = await async_client.delete(f"/assignments/{test_assignment.id}/clients/{created['id']}", headers=operator_headers)

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_operator_cannot_allocate(async_client, test_assignment, make_customer, operator_headers):
    customer = await make_customer()
    resp = await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 100},
        headers=operator_headers,
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_missing_token_rejected(async_client, test_assignment):
    resp = await async_client.get(f"/assignments/{test_assignment.id}/clients")
    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_not_found_responses(async_client, test_assignment, make_customer, admin_headers):
    assignment_id = test_assignment.id
    customer = await make_customer()

    resp = await async_client.post(
        "/assignments/9999/clients",
        json={"customerId": customer.id, "allocatedQuantity": 100},
        headers=admin_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"

    resp = await async_client.put(
        f"/assignments/{assignment_id}/clients/9999",
        json={"status": "completed"},
        headers=admin_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_malformed_body_rejected(async_client, test_assignment, admin_headers):
    resp = await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"allocatedQuantity": "lots"},
        headers=admin_headers,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_non_positive_quantity_is_a_business_error(async_client, test_assignment, make_customer, admin_headers):
    customer = await make_customer()
    resp = await async_client.post(
        f"/assignments/{test_assignment.id}/clients",
        json={"customerId": customer.id, "allocatedQuantity": 0},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidQuantity"


@pytest.mark.asyncio
async def test_create_and_fetch_assignment(async_client, test_truck, test_driver, admin_headers):
    resp = await async_client.post(
        "/assignments",
        json={"truckId": test_truck.id, "driverId": test_driver.id, "totalLoaded": 1200, "notes": "Ruta costa"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["status"] == "Open"
    assert created["totalRemaining"] == 1200.0
    assert created["fuelType"] == "DIESEL_B5"

    resp = await async_client.get(f"/assignments/{created['id']}", headers=admin_headers)
    assert resp.status_code == 200
    detail = resp.json()
    assert detail["assignment"]["id"] == created["id"]
    assert detail["available"] == 1200.0
    assert detail["clientAllocations"] == []


@pytest.mark.asyncio
async def test_fleet_refresh(async_client, test_assignment, admin_headers, operator_headers):
    resp = await async_client.post("/trucks/refresh-status", headers=operator_headers)
    assert resp.status_code == 403

    resp = await async_client.post("/trucks/refresh-status", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["checkedCount"] == 1
