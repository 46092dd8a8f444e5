from datetime import date

from fastapi.testclient import TestClient

API = "/api/v1/vehicles"


# ============================================================================
# MONTH VIEW
# ============================================================================


def test_month_view(client: TestClient, vehicle, rental_client, existing_contract):
    contract = existing_contract(vehicle.id, rental_client.id, date(2025, 6, 2), date(2025, 6, 5))
    contract_id = contract.id

    response = client.get(f"{API}/{vehicle.id}/availability", params={"year": 2025, "month": 6})
    assert response.status_code == 200
    days = response.json()
    assert len(days) == 30
    assert days[0] == {
        "date": "2025-06-01",
        "available": True,
        "contract_id": None,
        "reason": None,
    }
    booked = [d for d in days if not d["available"]]
    assert [d["date"] for d in booked] == [
        "2025-06-02",
        "2025-06-03",
        "2025-06-04",
        "2025-06-05",
    ]
    assert all(d["contract_id"] == contract_id for d in booked)
    assert all(d["reason"] == "BOOKED" for d in booked)


def test_month_view_ignores_cancelled_contracts(
    client: TestClient, vehicle, rental_client, existing_contract
):
    existing_contract(
        vehicle.id, rental_client.id, date(2025, 6, 2), date(2025, 6, 5), status="CANCELLED"
    )
    response = client.get(f"{API}/{vehicle.id}/availability", params={"year": 2025, "month": 6})
    assert all(d["available"] for d in response.json())


def test_month_view_leap_february(client: TestClient, vehicle):
    response = client.get(f"{API}/{vehicle.id}/availability", params={"year": 2028, "month": 2})
    assert response.status_code == 200
    assert len(response.json()) == 29


def test_month_view_of_retired_vehicle(client: TestClient, retired_vehicle):
    response = client.get(
        f"{API}/{retired_vehicle.id}/availability", params={"year": 2025, "month": 6}
    )
    assert response.status_code == 200
    days = response.json()
    assert not any(d["available"] for d in days)
    assert {d["reason"] for d in days} == {"VEHICLE_UNAVAILABLE"}


def test_month_view_errors(client: TestClient, vehicle):
    response = client.get(f"{API}/999/availability", params={"year": 2025, "month": 6})
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"

    response = client.get(f"{API}/{vehicle.id}/availability", params={"year": 2025, "month": 13})
    assert response.status_code == 422


# ============================================================================
# AVAILABILITY CHECK
# ============================================================================


def test_check_availability(client: TestClient, vehicle, rental_client, existing_contract):
    contract = existing_contract(vehicle.id, rental_client.id, date(2025, 6, 2), date(2025, 6, 5))
    contract_id = contract.id
    url = f"{API}/{vehicle.id}/availability/check"

    response = client.get(url, params={"start_date": "2025-06-06", "end_date": "2025-06-09"})
    assert response.status_code == 200
    assert response.json() == {
        "available": True,
        "vehicle_unavailable": False,
        "conflicting_contracts": [],
    }

    response = client.get(url, params={"start_date": "2025-06-05", "end_date": "2025-06-09"})
    data = response.json()
    assert data["available"] is False
    assert data["conflicting_contracts"] == [
        {
            "id": contract_id,
            "start_date": "2025-06-02",
            "end_date": "2025-06-05",
            "status": "CONFIRMED",
        }
    ]

    # A contract being edited does not conflict with itself
    response = client.get(
        url,
        params={
            "start_date": "2025-06-03",
            "end_date": "2025-06-07",
            "exclude_contract_id": contract_id,
        },
    )
    assert response.json()["available"] is True


def test_check_availability_of_retired_vehicle(client: TestClient, retired_vehicle):
    response = client.get(
        f"{API}/{retired_vehicle.id}/availability/check",
        params={"start_date": "2025-06-01", "end_date": "2025-06-03"},
    )
    assert response.status_code == 200
    assert response.json()["available"] is False
    assert response.json()["vehicle_unavailable"] is True


def test_check_availability_inverted_range(client: TestClient, vehicle):
    response = client.get(
        f"{API}/{vehicle.id}/availability/check",
        params={"start_date": "2025-06-05", "end_date": "2025-06-01"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_RANGE"


# ============================================================================
# CALENDAR RANGE VIEW
# ============================================================================


def test_calendar_range(client: TestClient, vehicle, rental_client, existing_contract):
    existing_contract(vehicle.id, rental_client.id, date(2025, 6, 30), date(2025, 7, 2))

    response = client.get(
        f"{API}/{vehicle.id}/calendar",
        params={"start_date": "2025-06-29", "end_date": "2025-07-03"},
    )
    assert response.status_code == 200
    days = response.json()
    assert [d["date"] for d in days] == [
        "2025-06-29",
        "2025-06-30",
        "2025-07-01",
        "2025-07-02",
        "2025-07-03",
    ]
    assert [d["available"] for d in days] == [True, False, False, False, True]


def test_calendar_range_too_long(client: TestClient, vehicle):
    response = client.get(
        f"{API}/{vehicle.id}/calendar",
        params={"start_date": "2025-01-01", "end_date": "2026-06-01"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "EXCESSIVE_DURATION"
