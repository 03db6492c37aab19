"""Integration tests for API endpoints"""

import pytest
from datetime import date
from httpx import AsyncClient
from conftest import DEADLINE, MOVE_OUT


pytestmark = pytest.mark.integration


async def _initiate(client: AsyncClient, lease_id: str, move_out_date: date = MOVE_OUT):
    return await client.post(
        "/v1/move-out",
        json={"lease_id": lease_id, "move_out_date": move_out_date.isoformat()},
    )


async def test_health_endpoint(client: AsyncClient):
    """Test health check endpoint"""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["jurisdiction"] == "MN 504B.178"


async def test_metrics_endpoint(client: AsyncClient, make_lease):
    """Test Prometheus metrics endpoint"""
    await _initiate(client, await make_lease())

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "deposit_disposition_initiated_total" in response.text


async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


async def test_initiate_move_out(client: AsyncClient, make_lease):
    """Test POST /v1/move-out creates a DRAFT disposition"""
    lease_id = await make_lease()

    response = await _initiate(client, lease_id)

    assert response.status_code == 201
    data = response.json()
    assert data["lease_id"] == lease_id
    assert data["status"] == "DRAFT"
    assert data["deadline_date"] == DEADLINE.isoformat()
    assert data["interest_accrued_cents"] == 1000
    assert data["refund_amount_cents"] == 101000
    assert data["itemized_deductions"] == []


async def test_initiate_move_out_twice_conflicts(client: AsyncClient, make_lease):
    lease_id = await make_lease()
    await _initiate(client, lease_id)

    response = await _initiate(client, lease_id)

    assert response.status_code == 409
    assert response.json()["error"] == "DispositionAlreadyInitiatedError"


async def test_initiate_unknown_lease(client: AsyncClient):
    response = await _initiate(client, "no-such-lease")

    assert response.status_code == 404
    assert response.json()["error"] == "LeaseNotFoundError"


async def test_initiate_move_out_before_deposit(client: AsyncClient, make_lease):
    lease_id = await make_lease()

    response = await _initiate(client, lease_id, date(2022, 6, 1))

    assert response.status_code == 422
    assert response.json()["error"] == "DispositionValidationError"


async def test_initiate_requires_move_out_date(client: AsyncClient):
    response = await client.post("/v1/move-out", json={"lease_id": "lease-1"})
    assert response.status_code == 422


async def test_move_out_status_not_started(client: AsyncClient, make_lease):
    lease_id = await make_lease()

    response = await client.get(f"/v1/move-out/{lease_id}")

    assert response.status_code == 200
    assert response.json()["status"] == "NOT_STARTED"
    assert response.json()["disposition"] is None


async def test_damage_item_flow_recalculates(client: AsyncClient, make_lease, make_inspection):
    """Test create/update/delete of damage items keeps the refund current"""
    lease_id = await make_lease()
    await _initiate(client, lease_id)
    inspection_id = await make_inspection(lease_id, "MOVE_OUT")
    linked = await client.post(
        f"/v1/dispositions/{lease_id}/move-out-inspection",
        json={"inspection_id": inspection_id},
    )
    assert linked.status_code == 200

    created = await client.post(
        f"/v1/inspections/{inspection_id}/damage-items",
        json={"description": "Broken window", "repair_cost_cents": 20000, "location": "Bedroom"},
    )
    wear = await client.post(
        f"/v1/inspections/{inspection_id}/damage-items",
        json={"description": "Worn carpet", "repair_cost_cents": 5000, "is_normal_wear": True},
    )
    assert created.status_code == 201
    assert created.json()["is_deductible"] is True
    assert wear.json()["is_deductible"] is False

    disposition = (await client.get(f"/v1/dispositions/{lease_id}")).json()
    assert disposition["total_deductions_cents"] == 20000
    assert disposition["refund_amount_cents"] == 81000
    assert disposition["itemized_deductions"] == [
        {"description": "Broken window", "location": "Bedroom", "amount_cents": 20000, "notes": None}
    ]

    patched = await client.patch(f"/v1/damage-items/{created.json()['id']}", json={"repair_cost_cents": 30000})
    assert patched.status_code == 200
    assert patched.json()["description"] == "Broken window"
    disposition = (await client.get(f"/v1/dispositions/{lease_id}")).json()
    assert disposition["refund_amount_cents"] == 71000

    deleted = await client.delete(f"/v1/damage-items/{created.json()['id']}")
    assert deleted.status_code == 204
    disposition = (await client.get(f"/v1/dispositions/{lease_id}")).json()
    assert disposition["refund_amount_cents"] == 101000

    items = await client.get(f"/v1/inspections/{inspection_id}/damage-items")
    assert [item["description"] for item in items.json()] == ["Worn carpet"]

    status = (await client.get(f"/v1/move-out/{lease_id}")).json()
    assert status["status"] == "DRAFT"
    assert len(status["damage_items"]) == 1


async def test_damage_item_rejects_negative_cost(client: AsyncClient, make_lease, make_inspection):
    lease_id = await make_lease()
    inspection_id = await make_inspection(lease_id, "MOVE_OUT")

    response = await client.post(
        f"/v1/inspections/{inspection_id}/damage-items",
        json={"description": "Scuff", "repair_cost_cents": -5},
    )

    assert response.status_code == 422


async def test_send_and_refund(client: AsyncClient, make_lease):
    lease_id = await make_lease()
    await _initiate(client, lease_id)

    early_refund = await client.post(f"/v1/dispositions/{lease_id}/refund", json={"method": "CHECK", "amount_cents": 1})
    assert early_refund.status_code == 409
    assert early_refund.json()["error"] == "InvalidTransitionError"

    sent = await client.post(
        f"/v1/dispositions/{lease_id}/send",
        json={"method": "CERTIFIED_MAIL", "tracking_number": "9400111"},
    )
    assert sent.status_code == 200
    assert sent.json()["status"] == "SENT"
    assert sent.json()["tracking_number"] == "9400111"

    resent = await client.post(f"/v1/dispositions/{lease_id}/send", json={"method": "EMAIL"})
    assert resent.status_code == 409

    refunded = await client.post(
        f"/v1/dispositions/{lease_id}/refund",
        json={"method": "CHECK", "amount_cents": 100500, "check_number": "1042"},
    )
    assert refunded.status_code == 200
    assert refunded.json()["status"] == "ACKNOWLEDGED"
    assert refunded.json()["refund_amount_cents"] == 100500


async def test_send_rejects_unknown_method(client: AsyncClient, make_lease):
    lease_id = await make_lease()
    await _initiate(client, lease_id)

    response = await client.post(f"/v1/dispositions/{lease_id}/send", json={"method": "FAX"})

    assert response.status_code == 422


async def test_deadline_endpoint(client: AsyncClient, make_lease, clock):
    lease_id = await make_lease()
    await _initiate(client, lease_id)
    clock.today = date(2024, 2, 5)

    response = await client.get(f"/v1/dispositions/{lease_id}/deadline")

    assert response.status_code == 200
    data = response.json()
    assert data["deadline_date"] == DEADLINE.isoformat()
    assert data["days_until_deadline"] == -5
    assert data["is_overdue"] is True
    assert data["is_sent"] is False


async def test_list_overdue_dispositions(client: AsyncClient, make_lease, clock):
    overdue_id = await make_lease()
    on_time_id = await make_lease()
    await _initiate(client, overdue_id)
    await _initiate(client, on_time_id, date(2024, 1, 25))
    clock.today = date(2024, 2, 5)

    response = await client.get("/v1/dispositions", params={"overdue_only": "true"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert [d["lease_id"] for d in data["dispositions"]] == [overdue_id]


async def test_list_dispositions_rejects_large_limit(client: AsyncClient):
    response = await client.get("/v1/dispositions", params={"limit": 500})
    assert response.status_code == 422


async def test_unknown_disposition_is_404(client: AsyncClient, make_lease):
    lease_id = await make_lease()

    response = await client.get(f"/v1/dispositions/{lease_id}/deadline")

    assert response.status_code == 404
    assert response.json()["error"] == "DispositionNotFoundError"


async def test_comparison_endpoint(client: AsyncClient, make_lease, make_inspection):
    lease_id = await make_lease()
    await make_inspection(lease_id, "MOVE_IN", [("Kitchen", "Floor", "Good", False)])
    await make_inspection(lease_id, "MOVE_OUT", [("Kitchen", "Floor", "Damaged", True)])

    response = await client.get(f"/v1/dispositions/{lease_id}/comparison")

    assert response.status_code == 200
    data = response.json()
    assert data["missing_move_in"] is False
    row = data["comparison"][0]
    assert row["move_in"]["condition"] == "Good"
    assert row["move_out"]["condition"] == "Damaged"
    assert row["condition_changed"] is True
    assert row["damage_added"] is True


async def test_deposit_stats_endpoint(client: AsyncClient, make_lease):
    """Test GET /v1/deposits/stats over one running lease and one ended lease"""
    await make_lease()
    await make_lease(deposit_cents=80000, status="TERMINATED")

    response = await client.get("/v1/deposits/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["as_of"] == "2024-01-20"
    assert data["total_deposits_held_cents"] == 100000
    assert data["total_interest_accrued_cents"] == 1027
    assert data["active_deposits_count"] == 1
    assert data["pending_dispositions"] == 1
    assert data["interest_due_soon"] == 0
    assert data["default_interest_rate"] == "0.01"


async def test_deposit_stats_as_of_date(client: AsyncClient, make_lease):
    await make_lease()

    response = await client.get("/v1/deposits/stats", params={"as_of": "2024-01-10"})

    assert response.status_code == 200
    assert response.json()["as_of"] == "2024-01-10"
    assert response.json()["total_interest_accrued_cents"] == 1000


async def test_damage_guidance_endpoint(client: AsyncClient):
    response = await client.get("/v1/damage-items/guidance")

    assert response.status_code == 200
    data = response.json()
    assert data["jurisdiction"] == "MN 504B.178"
    assert "Worn carpet in high-traffic areas" in data["normal_wear_examples"]
    assert "Pet damage" in data["deductible_damage_examples"]
    assert data["required_disclosures"][0] == "Bank name where deposit was held"
