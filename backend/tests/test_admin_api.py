"""
Tests for the admin surface: token verification, booking management,
revenue entries and reports, settings and the dashboard.
"""

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from club_ledger.core.exceptions import StorageFault
from club_ledger.core.security import create_access_token
from club_ledger.main import app
from club_ledger.services import revenue_service

from conftest import booking_payload


async def book(client: AsyncClient, match_id: int, **overrides) -> dict:
    response = await client.post("/api/bookings", json=booking_payload(match_id, **overrides))
    assert response.status_code == 201
    return response.json()["data"]


# ---------- auth ----------

@pytest.mark.asyncio
async def test_admin_requires_token(client: AsyncClient):
    response = await client.get("/api/admin/bookings")
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication token missing."}


@pytest.mark.asyncio
async def test_admin_rejects_bad_tokens(client: AsyncClient):
    response = await client.get("/api/admin/bookings", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401

    expired = create_access_token({"sub": "1", "role": "admin"}, expires_delta=timedelta(minutes=-1))
    response = await client.get("/api/admin/bookings", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Session expired. Please login again."


@pytest.mark.asyncio
async def test_admin_requires_admin_role(client: AsyncClient, member_headers):
    response = await client.get("/api/admin/settings", headers=member_headers)
    assert response.status_code == 403
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_editor_role_is_admin(client: AsyncClient):
    token = create_access_token({"id": 5, "role": "editor"})
    response = await client.get("/api/admin/settings", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


# ---------- bookings ----------

@pytest.mark.asyncio
async def test_booking_management(client: AsyncClient, admin_headers, test_match):
    created = await book(client, test_match.id)
    booking_id = created["id"]

    listing = (await client.get("/api/admin/bookings", headers=admin_headers)).json()["data"]
    assert [b["id"] for b in listing] == [booking_id]
    assert listing[0]["match"]["opponent"] == "Nakuru City"

    response = await client.get(f"/api/admin/bookings/match/{test_match.id}", headers=admin_headers)
    assert len(response.json()["data"]) == 1

    response = await client.put(
        f"/api/admin/bookings/{booking_id}/status",
        json={"payment_status": "pending"},
        headers=admin_headers,
    )
    assert response.json()["data"]["payment_status"] == "pending"

    response = await client.post(f"/api/admin/bookings/{booking_id}/confirm", headers=admin_headers)
    assert response.json()["data"]["payment_status"] == "paid"

    response = await client.post(f"/api/admin/bookings/{booking_id}/cancel", headers=admin_headers)
    assert response.json()["message"] == "Booking cancelled successfully"
    assert response.json()["data"]["payment_status"] == "cancelled"

    response = await client.delete(f"/api/admin/bookings/{booking_id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/admin/bookings/{booking_id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_status_lists_allowed(client: AsyncClient, admin_headers, test_match):
    created = await book(client, test_match.id)

    response = await client.put(
        f"/api/admin/bookings/{created['id']}/status",
        json={"payment_status": "refunded"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["data"] == {
        "field": "payment_status",
        "allowed": ["pending", "paid", "cancelled"],
    }


@pytest.mark.asyncio
async def test_booking_stats_and_revenue_by_match(client: AsyncClient, admin_headers, test_match, completed_match):
    await book(client, test_match.id)
    await book(client, test_match.id, ticket_type="regular", quantity=1)

    stats = (await client.get("/api/admin/bookings/stats", headers=admin_headers)).json()["data"]
    assert stats["total_bookings"] == 2
    assert stats["total_tickets"] == 5
    assert stats["total_revenue"] == 90.0
    assert stats["paid_revenue"] == 90.0

    rows = (await client.get("/api/admin/bookings/revenue-by-match", headers=admin_headers)).json()["data"]
    assert len(rows) == 2
    assert rows[1]["opponent"] == "Molo Stars"
    assert rows[1]["total_revenue"] == 0.0


# ---------- revenue ----------

@pytest.mark.asyncio
async def test_revenue_crud(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/admin/revenue",
        json={"source": "merchandise", "amount": "45.50", "description": "Scarves", "transaction_date": "2025-05-02"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    entry = response.json()["data"]
    assert entry["amount"] == 45.5
    assert entry["transaction_date"] == "2025-05-02"

    response = await client.put(
        f"/api/admin/revenue/{entry['id']}",
        json={"source": "merchandise", "amount": 60, "transaction_date": "2025-05-03T09:00:00Z"},
        headers=admin_headers,
    )
    assert response.json()["data"]["amount"] == 60.0
    assert response.json()["data"]["transaction_date"] == "2025-05-03"

    response = await client.get("/api/admin/revenue", params={"source": "merchandise"}, headers=admin_headers)
    assert len(response.json()["data"]) == 1

    response = await client.delete(f"/api/admin/revenue/{entry['id']}", headers=admin_headers)
    assert response.json()["message"] == "Revenue record deleted successfully"

    response = await client.delete(f"/api/admin/revenue/{entry['id']}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_revenue_validation(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/admin/revenue", json={"source": "raffle", "amount": 10}, headers=admin_headers
    )
    assert response.status_code == 400
    assert "sponsorship" in response.json()["data"]["allowed"]

    response = await client.post(
        "/api/admin/revenue", json={"source": "other", "amount": -10}, headers=admin_headers
    )
    assert response.status_code == 400

    for amount in ("1e40", "100000000"):
        response = await client.post(
            "/api/admin/revenue", json={"source": "other", "amount": amount}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["data"]["field"] == "amount"

    response = await client.post(
        "/api/admin/revenue",
        json={"source": "other", "amount": 10, "transaction_date": "yesterday"},
        headers=admin_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_revenue_reports(client: AsyncClient, admin_headers):
    for amount, on in [("100.005", "2025-03-01"), ("50.005", "2025-03-20"), ("10", "2025-04-01")]:
        await client.post(
            "/api/admin/revenue",
            json={"source": "tickets", "amount": amount, "transaction_date": on},
            headers=admin_headers,
        )

    summary = (
        await client.get(
            "/api/admin/revenue/summary",
            params={"start_date": "2025-03-01", "end_date": "2025-03-31"},
            headers=admin_headers,
        )
    ).json()["data"]
    assert summary["total_revenue"] == 150.01
    assert summary["range"] == {"start_date": "2025-03-01", "end_date": "2025-03-31"}

    monthly = (
        await client.get("/api/admin/revenue/monthly", params={"year": 2025, "month": 4}, headers=admin_headers)
    ).json()["data"]
    assert monthly["total_revenue"] == 10.0

    response = await client.get("/api/admin/revenue/monthly", params={"year": 2025, "month": 13}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["data"]["field"] == "month"

    yearly = (await client.get("/api/admin/revenue/yearly", params={"year": 2025}, headers=admin_headers)).json()["data"]
    assert [(row["month"], row["total_amount"]) for row in yearly] == [(3, 150.01), (4, 10.0)]


# ---------- settings ----------

@pytest.mark.asyncio
async def test_settings_endpoints(client: AsyncClient, admin_headers):
    response = await client.get("/api/admin/settings", headers=admin_headers)
    assert response.json()["data"]["membership_fee"] == "50"

    response = await client.put(
        "/api/admin/settings/ticket-prices",
        json={"vip": 30, "regular": 15, "student": 7},
        headers=admin_headers,
    )
    assert response.json()["data"] == {"vip": 30, "regular": 15, "student": 7}

    response = await client.put("/api/admin/settings/membership-fee", json={"fee": 65}, headers=admin_headers)
    assert response.json()["data"] == {"membership_fee": 65}

    response = await client.get("/api/admin/settings/membership-fee", headers=admin_headers)
    assert response.json()["data"] == {"membership_fee": 65}

    response = await client.put(
        "/api/admin/settings/club-info", json={"slogan": "Howl Together"}, headers=admin_headers
    )
    assert response.json()["data"] == {"club_slogan": "Howl Together"}

    response = await client.get("/api/settings/club-info")
    assert response.json()["data"]["club_slogan"] == "Howl Together"


@pytest.mark.asyncio
async def test_invalid_ticket_prices_leave_all_unchanged(client: AsyncClient, admin_headers):
    response = await client.put(
        "/api/admin/settings/ticket-prices",
        json={"vip": -1, "regular": 15, "student": 7},
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = await client.put(
        "/api/admin/settings/ticket-prices",
        json={"vip": "1e30", "regular": 15, "student": 7},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["data"]["field"] == "vip"

    response = await client.get("/api/admin/settings/ticket-prices", headers=admin_headers)
    assert response.json()["data"] == {"vip": 20, "regular": 10, "student": 5}


# ---------- dashboard ----------

@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, admin_headers, test_match, completed_match, squad):
    await book(client, test_match.id)  # 80.00 paid
    await client.post(
        "/api/admin/revenue",
        json={"source": "sponsorship", "amount": "1000.50", "transaction_date": "2025-01-15"},
        headers=admin_headers,
    )

    response = await client.get("/api/admin/dashboard/stats", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["players"]["total"] == 3
    assert data["top_performers"][0]["name"] == "Brian Otieno"
    assert data["matches"]["upcoming"] == 1
    assert data["matches"]["recent_results"][0]["opponent"] == "Molo Stars"
    assert data["bookings"]["paid_revenue"] == 80.0
    assert data["revenue"]["total_revenue"] == 1000.5
    assert data["ticket_prices"] == {"vip": 20, "regular": 10, "student": 5}
    assert data["total_income"] == 1080.5


@pytest.mark.asyncio
async def test_dashboard_fails_as_a_whole(client: AsyncClient, admin_headers, test_match, squad, monkeypatch):
    """One failing section fails the request; no partial stats are returned."""

    async def failing_summary(db, *args):
        raise StorageFault("revenue store offline")

    monkeypatch.setattr(revenue_service, "get_summary", failing_summary)

    response = await client.get("/api/admin/dashboard/stats", headers=admin_headers)
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "data" not in body


@pytest.mark.asyncio
async def test_dashboard_unexpected_error_is_generic_500(client: AsyncClient, admin_headers, monkeypatch):
    async def broken_summary(db, *args):
        raise RuntimeError("boom")

    monkeypatch.setattr(revenue_service, "get_summary", broken_summary)

    # the catch-all handler responds, then re-raises to the server; keep the response
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        response = await raw_client.get("/api/admin/dashboard/stats", headers=admin_headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
