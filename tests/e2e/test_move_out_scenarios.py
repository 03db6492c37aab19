"""
E2E tests walking full move-out scenarios through the HTTP API.

Scenarios:
- clean_tenant: damage partly normal wear, letter sent on time, refund paid
- late_landlord: letter goes out after the deadline
- disputed_itemization: tenant disputes, landlord settles for a different amount
- new_damage_found: move-in vs move-out comparison feeds the damage list
"""

import pytest
from datetime import date
from httpx import AsyncClient
from conftest import DEADLINE, MOVE_OUT


pytestmark = pytest.mark.integration


async def _start(client: AsyncClient, make_lease, make_inspection, move_out_items=()):
    """Lease with move-out initiated and its move-out inspection linked"""
    lease_id = await make_lease()
    response = await client.post(
        "/v1/move-out",
        json={"lease_id": lease_id, "move_out_date": MOVE_OUT.isoformat()},
    )
    assert response.status_code == 201
    inspection_id = await make_inspection(lease_id, "MOVE_OUT", move_out_items)
    response = await client.post(
        f"/v1/dispositions/{lease_id}/move-out-inspection",
        json={"inspection_id": inspection_id},
    )
    assert response.status_code == 200
    return lease_id, inspection_id


async def test_clean_tenant(client: AsyncClient, make_lease, make_inspection):
    """
    clean_tenant: $1000 deposit held a year at 1%, $200 real damage, $50 wear
    Expected: $810 refund itemizing only the real damage
    """
    lease_id, inspection_id = await _start(client, make_lease, make_inspection)

    for body in (
        {"description": "Broken window", "repair_cost_cents": 20000, "location": "Bedroom"},
        {"description": "Faded paint", "repair_cost_cents": 5000, "is_normal_wear": True},
    ):
        response = await client.post(f"/v1/inspections/{inspection_id}/damage-items", json=body)
        assert response.status_code == 201

    reviewed = await client.post(f"/v1/dispositions/{lease_id}/review")
    assert reviewed.json()["status"] == "PENDING_REVIEW"
    assert reviewed.json()["refund_amount_cents"] == 81000
    assert len(reviewed.json()["itemized_deductions"]) == 1

    deadline = (await client.get(f"/v1/dispositions/{lease_id}/deadline")).json()
    assert deadline["is_overdue"] is False
    assert deadline["missing_disclosures"] == []

    sent = await client.post(f"/v1/dispositions/{lease_id}/send", json={"method": "CERTIFIED_MAIL"})
    assert sent.json()["status"] == "SENT"

    refunded = await client.post(
        f"/v1/dispositions/{lease_id}/refund",
        json={"method": "CHECK", "amount_cents": sent.json()["refund_amount_cents"], "check_number": "2001"},
    )
    assert refunded.status_code == 200
    assert refunded.json()["status"] == "ACKNOWLEDGED"
    assert refunded.json()["refund_amount_cents"] == 81000
    assert refunded.json()["total_deductions_cents"] == 20000


async def test_late_landlord(client: AsyncClient, make_lease, make_inspection, clock):
    """
    late_landlord: nothing sent by the 21-day deadline
    Expected: overdue until the letter goes out, then cleared for good
    """
    lease_id, _ = await _start(client, make_lease, make_inspection)

    clock.today = DEADLINE
    on_deadline = (await client.get(f"/v1/dispositions/{lease_id}/deadline")).json()
    assert on_deadline["is_overdue"] is False
    assert on_deadline["is_urgent"] is True

    clock.today = date(2024, 2, 5)
    overdue = (await client.get("/v1/dispositions", params={"overdue_only": "true"})).json()
    assert [d["lease_id"] for d in overdue["dispositions"]] == [lease_id]

    await client.post(f"/v1/dispositions/{lease_id}/send", json={"method": "REGULAR_MAIL"})

    clock.today = date(2024, 3, 1)
    after = (await client.get(f"/v1/dispositions/{lease_id}/deadline")).json()
    assert after["is_overdue"] is False
    assert after["is_sent"] is True
    assert after["days_until_deadline"] < 0
    overdue = (await client.get("/v1/dispositions", params={"overdue_only": "true"})).json()
    assert overdue["total"] == 0


async def test_disputed_itemization(client: AsyncClient, make_lease, make_inspection):
    """
    disputed_itemization: tenant contests a $300 carpet charge after the letter
    Expected: damage list frozen, settlement amount recorded as the refund
    """
    lease_id, inspection_id = await _start(client, make_lease, make_inspection)
    carpet = await client.post(
        f"/v1/inspections/{inspection_id}/damage-items",
        json={"description": "Carpet replacement", "repair_cost_cents": 30000},
    )
    await client.post(f"/v1/dispositions/{lease_id}/send", json={"method": "EMAIL"})

    disputed = await client.post(f"/v1/dispositions/{lease_id}/dispute", json={"reason": "Carpet was 10 years old"})
    assert disputed.json()["status"] == "DISPUTED"

    frozen = await client.patch(f"/v1/damage-items/{carpet.json()['id']}", json={"repair_cost_cents": 10000})
    assert frozen.status_code == 409

    settled = await client.post(f"/v1/dispositions/{lease_id}/refund", json={"method": "ACH", "amount_cents": 91000})
    assert settled.json()["status"] == "ACKNOWLEDGED"
    assert settled.json()["refund_amount_cents"] == 91000
    assert settled.json()["total_deductions_cents"] == 30000


async def test_new_damage_found(client: AsyncClient, make_lease, make_inspection):
    """
    new_damage_found: faucet damaged since move-in, carpet has no baseline
    Expected: both rows flagged as changed, sorted by room
    """
    lease_id = await make_lease()
    await make_inspection(lease_id, "MOVE_IN", [("Kitchen", "Faucet", "GOOD", False)])
    await client.post("/v1/move-out", json={"lease_id": lease_id, "move_out_date": MOVE_OUT.isoformat()})
    await make_inspection(
        lease_id,
        "MOVE_OUT",
        [("Kitchen", "Faucet", "DAMAGED", True), ("Bedroom", "Carpet", "GOOD", False)],
    )

    rows = (await client.get(f"/v1/dispositions/{lease_id}/comparison")).json()["comparison"]

    assert [(row["room"], row["item"]) for row in rows] == [("Bedroom", "Carpet"), ("Kitchen", "Faucet")]
    assert rows[0]["condition_changed"] is True
    assert rows[0]["move_in"] is None
    assert rows[1]["condition_changed"] is True
    assert rows[1]["damage_added"] is True
