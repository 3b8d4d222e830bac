"""Integration tests for ride directory endpoints."""

from typing import Callable
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from postgrest.exceptions import APIError as PostgrestAPIError

from conftest import make_query_builder

USER_ID = "550e8400-e29b-41d4-a716-446655440000"
RIDE_ID = "770e8400-e29b-41d4-a716-446655440000"

DRIVER = {
    "id": USER_ID,
    "full_name": "Test Student",
    "email": "student@student.iqra.edu.pk",
    "university": "Iqra University",
    "phone": "0300-1234567",
    "rating": 4.8,
    "total_rides": 12,
    "created_at": "2026-09-01T09:00:00+00:00",
    "updated_at": "2026-09-01T09:00:00+00:00",
}


def ride_row(**overrides: object) -> dict:
    """Build a ride row with its driver embedded."""
    row = {
        "id": RIDE_ID,
        "driver_id": USER_ID,
        "from_location": "Main Campus",
        "to_location": "Gulshan-e-Iqbal",
        "departure_date": "2026-10-20",
        "departure_time": "08:30:00",
        "available_seats": 3,
        "total_seats": 4,
        "price_per_person": 150.0,
        "preferences": ["No Smoking", "Music OK"],
        "additional_notes": "Meeting at the main gate",
        "status": "active",
        "created_at": "2026-10-17T09:00:00+00:00",
        "updated_at": "2026-10-17T09:00:00+00:00",
        "driver": DRIVER,
    }
    row.update(overrides)
    return row


def request_row(**overrides: object) -> dict:
    """Build a ride request row."""
    row = {
        "id": "880e8400-e29b-41d4-a716-446655440000",
        "ride_id": RIDE_ID,
        "passenger_id": USER_ID,
        "status": "pending",
        "message": "",
        "created_at": "2026-10-17T10:00:00+00:00",
    }
    row.update(overrides)
    return row


NEW_RIDE = {
    "from_location": "Main Campus",
    "to_location": "Gulshan-e-Iqbal",
    "departure_date": "2026-10-20",
    "departure_time": "08:30",
    "available_seats": 3,
    "total_seats": 4,
    "price_per_person": 150,
    "preferences": ["No Smoking", "Music OK"],
    "additional_notes": "Meeting at the main gate",
}


class TestBrowseRides:
    """Tests for GET /api/v1/rides."""

    def test_lists_rides_without_auth(
        self, client: TestClient, mock_supabase_client: MagicMock
    ) -> None:
        """Test that browsing is public and returns rides with drivers."""
        builder = make_query_builder([ride_row()])
        mock_supabase_client.table.return_value = builder

        response = client.get("/api/v1/rides")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["driver"]["full_name"] == "Test Student"
        assert data[0]["preferences"] == ["No Smoking", "Music OK"]
        builder.eq.assert_called_once_with("status", "active")
        builder.ilike.assert_not_called()

    def test_rides_are_ordered_by_departure(
        self, client: TestClient, mock_supabase_client: MagicMock
    ) -> None:
        """Test that rides come back soonest first."""
        mock_supabase_client.table.return_value = make_query_builder(
            [
                ride_row(id="00000000-0000-0000-0000-000000000002", departure_time="17:00:00"),
                ride_row(id="00000000-0000-0000-0000-000000000001", departure_time="08:00:00"),
            ]
        )

        data = client.get("/api/v1/rides").json()

        assert [ride["departure_time"] for ride in data] == ["08:00:00", "17:00:00"]

    def test_returns_empty_list_when_store_fails(
        self, client: TestClient, mock_supabase_client: MagicMock
    ) -> None:
        """Test that a failing read is not reported as an error."""
        builder = make_query_builder()
        builder.execute.side_effect = Exception("connection refused")
        mock_supabase_client.table.return_value = builder

        response = client.get("/api/v1/rides")

        assert response.status_code == 200
        assert response.json() == []


class TestSearchRides:
    """Tests for GET /api/v1/rides with filters."""

    def test_filters_are_passed_to_store(
        self, client: TestClient, mock_supabase_client: MagicMock
    ) -> None:
        """Test that origin, destination and date become query filters."""
        builder = make_query_builder([ride_row()])
        mock_supabase_client.table.return_value = builder

        response = client.get(
            "/api/v1/rides",
            params={"from": "camp", "to": "gulshan", "date": "2026-10-20"},
        )

        assert response.status_code == 200
        builder.ilike.assert_any_call("from_location", "%camp%")
        builder.ilike.assert_any_call("to_location", "%gulshan%")
        builder.eq.assert_any_call("departure_date", "2026-10-20")

    def test_rejects_malformed_date(self, client: TestClient) -> None:
        """Test that the date filter must be a date."""
        response = client.get("/api/v1/rides", params={"date": "next friday"})

        assert response.status_code == 422


class TestGetRide:
    """Tests for GET /api/v1/rides/{ride_id}."""

    def test_returns_ride(self, client: TestClient, mock_supabase_client: MagicMock) -> None:
        """Test that a single ride is returned with its driver."""
        builder = make_query_builder([ride_row()])
        mock_supabase_client.table.return_value = builder

        response = client.get(f"/api/v1/rides/{RIDE_ID}")

        assert response.status_code == 200
        assert response.json()["id"] == RIDE_ID
        builder.eq.assert_called_once_with("id", RIDE_ID)

    def test_returns_404_for_unknown_ride(
        self, client: TestClient, mock_supabase_client: MagicMock
    ) -> None:
        """Test that a missing ride is a 404."""
        mock_supabase_client.table.return_value = make_query_builder([])

        response = client.get(f"/api/v1/rides/{RIDE_ID}")

        assert response.status_code == 404


class TestPreferences:
    """Tests for GET /api/v1/rides/preferences."""

    def test_returns_suggestions(self, client: TestClient) -> None:
        """Test that the suggested tags are listed."""
        response = client.get("/api/v1/rides/preferences")

        assert response.status_code == 200
        assert "No Smoking" in response.json()["preferences"]


class TestCreateRide:
    """Tests for POST /api/v1/rides."""

    def test_creates_ride_for_caller(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that the caller becomes the driver of the new ride."""
        builder = make_query_builder([ride_row(driver=None)], [ride_row()], [ride_row()])
        mock_supabase_client.table.return_value = builder

        response = client.post(
            "/api/v1/rides",
            headers={"Authorization": f"Bearer {token_factory()}"},
            json=NEW_RIDE,
        )

        assert response.status_code == 201
        assert response.json()["driver"]["id"] == USER_ID
        inserted = builder.insert.call_args.args[0]
        assert inserted["driver_id"] == USER_ID
        assert inserted["departure_time"] == "08:30:00"
        assert "status" not in inserted

    def test_insert_runs_as_caller(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that the ride insert is sent with the caller's token, not the app key."""
        token = token_factory()
        user_client = MagicMock()
        user_builder = make_query_builder([ride_row(driver=None)])
        user_client.table.return_value = user_builder
        mock_supabase_client.table.return_value = make_query_builder([ride_row()], [ride_row()])

        with patch("src.api.deps.create_user_client", return_value=user_client) as factory:
            response = client.post(
                "/api/v1/rides",
                headers={"Authorization": f"Bearer {token}"},
                json=NEW_RIDE,
            )

        assert response.status_code == 201
        factory.assert_called_once_with(token)
        user_builder.insert.assert_called_once()
        mock_supabase_client.table.return_value.insert.assert_not_called()

    def test_requires_auth(self, client: TestClient) -> None:
        """Test that anonymous callers cannot post rides."""
        response = client.post("/api/v1/rides", json=NEW_RIDE)

        assert response.status_code == 401

    def test_rejects_too_many_seats(self, client: TestClient, token_factory: Callable[..., str]) -> None:
        """Test that more than four seats are refused."""
        response = client.post(
            "/api/v1/rides",
            headers={"Authorization": f"Bearer {token_factory()}"},
            json={**NEW_RIDE, "available_seats": 5},
        )

        assert response.status_code == 422

    def test_store_rejection_is_reported(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that the store's message reaches the caller."""
        builder = make_query_builder()
        builder.execute.side_effect = PostgrestAPIError(
            {"message": 'new row violates row-level security policy for table "rides"', "code": "42501"}
        )
        mock_supabase_client.table.return_value = builder

        response = client.post(
            "/api/v1/rides",
            headers={"Authorization": f"Bearer {token_factory()}"},
            json=NEW_RIDE,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "store_error"
        assert "row-level security" in data["message"]

    def test_empty_insert_result_is_reported(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that an insert returning no row is a store error."""
        mock_supabase_client.table.return_value = make_query_builder([])

        response = client.post(
            "/api/v1/rides",
            headers={"Authorization": f"Bearer {token_factory()}"},
            json=NEW_RIDE,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "store_error"


class TestRequestRide:
    """Tests for POST /api/v1/rides/{ride_id}/requests."""

    def test_creates_pending_request(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that a join request is recorded as pending."""
        builder = make_query_builder([request_row(message="Can you pick me up at the gate?")])
        mock_supabase_client.table.return_value = builder

        response = client.post(
            f"/api/v1/rides/{RIDE_ID}/requests",
            headers={"Authorization": f"Bearer {token_factory()}"},
            json={"message": "Can you pick me up at the gate?"},
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        mock_supabase_client.table.assert_called_with("ride_requests")
        assert builder.insert.call_args.args[0] == {
            "ride_id": RIDE_ID,
            "passenger_id": USER_ID,
            "status": "pending",
            "message": "Can you pick me up at the gate?",
        }

    def test_message_is_optional(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that a request without a body is accepted."""
        builder = make_query_builder([request_row()])
        mock_supabase_client.table.return_value = builder

        response = client.post(
            f"/api/v1/rides/{RIDE_ID}/requests",
            headers={"Authorization": f"Bearer {token_factory()}"},
        )

        assert response.status_code == 201
        assert builder.insert.call_args.args[0]["message"] == ""

    def test_request_runs_as_caller(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that the join request is sent with the caller's token."""
        token = token_factory()
        user_client = MagicMock()
        user_client.table.return_value = make_query_builder([request_row()])

        with patch("src.api.deps.create_user_client", return_value=user_client) as factory:
            response = client.post(
                f"/api/v1/rides/{RIDE_ID}/requests",
                headers={"Authorization": f"Bearer {token}"},
            )

        assert response.status_code == 201
        factory.assert_called_once_with(token)
        user_client.table.assert_called_once_with("ride_requests")
        mock_supabase_client.table.assert_not_called()

    def test_requires_auth(self, client: TestClient) -> None:
        """Test that anonymous callers cannot request rides."""
        response = client.post(f"/api/v1/rides/{RIDE_ID}/requests")

        assert response.status_code == 401

    def test_unknown_ride_is_store_error(
        self,
        client: TestClient,
        mock_supabase_client: MagicMock,
        token_factory: Callable[..., str],
    ) -> None:
        """Test that a foreign-key failure surfaces as a store error."""
        builder = make_query_builder()
        builder.execute.side_effect = PostgrestAPIError(
            {
                "message": 'insert or update on table "ride_requests" violates foreign key constraint',
                "code": "23503",
            }
        )
        mock_supabase_client.table.return_value = builder

        response = client.post(
            f"/api/v1/rides/{RIDE_ID}/requests",
            headers={"Authorization": f"Bearer {token_factory()}"},
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["type"] == "23503"
