"""Integration tests for API endpoints"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def officer_id(client: TestClient) -> int:
    response = client.post(
        "/v1/users",
        json={
            "username": "officer1",
            "password": "s3cure-pass",
            "full_name": "Nur Aisyah",
            "email": "officer1@example.com",
            "role": "loan_officer",
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def client_id(client: TestClient) -> int:
    response = client.post(
        "/v1/clients",
        json={
            "full_name": "Ahmad bin Ismail",
            "email": "ahmad@example.com",
            "phone": "+60123456789",
            "identification_number": "850101-14-5678",
            "identification_type": "national_id",
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def gold_item_id(client: TestClient) -> int:
    response = client.post(
        "/v1/gold-items",
        json={"type": "jewelry", "weight": "50", "purity": 22, "estimated_value": "5000"},
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def loan_id(client: TestClient, client_id: int, gold_item_id: int, officer_id: int) -> int:
    response = client.post(
        "/v1/loans",
        json={
            "client_id": client_id,
            "gold_item_ids": [gold_item_id],
            "financing_ratio": 0.70,
            "profit_rate": 5,
            "term_months": 12,
            "payment_frequency": "monthly",
            "created_by": officer_id,
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


def _activate(client: TestClient, loan_id: int) -> None:
    for status in ("verification", "approved", "active"):
        response = client.patch(f"/v1/loans/{loan_id}/status", json={"status": status})
        assert response.status_code == 200


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, loan_id: int):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "rahnu_loans_created_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated_when_absent(client: TestClient):
    response = client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 36


def test_unknown_paths_share_one_metrics_label(client: TestClient):
    assert client.get("/v1/no-such-thing/42").status_code == 404

    text = client.get("/metrics").text
    assert 'endpoint="unmatched"' in text
    assert "no-such-thing" not in text


def test_user_response_hides_password(client: TestClient, officer_id: int):
    data = client.get(f"/v1/users/{officer_id}").json()
    assert data["username"] == "officer1"
    assert "password" not in data
    assert "password_hash" not in data


def test_duplicate_username_is_409(client: TestClient, officer_id: int):
    response = client.post(
        "/v1/users",
        json={"username": "officer1", "password": "s3cure-pass", "full_name": "X", "email": "x@example.com"},
    )
    assert response.status_code == 409
    assert response.json()["error"] == "ConflictError"


def test_create_and_get_loan(client: TestClient, loan_id: int, gold_item_id: int):
    response = client.get(f"/v1/loans/{loan_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["gold_item_ids"] == [gold_item_id]
    assert Decimal(data["total_gold_value"]) == Decimal("5000.00")
    assert Decimal(data["financing_amount"]) == Decimal("3500.00")
    assert data["contract_number"].startswith("GF-20250115-")


def test_get_loan_not_found(client: TestClient):
    response = client.get("/v1/loans/999")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


def test_ratio_outside_policy_is_rejected(client: TestClient, client_id: int, gold_item_id: int, officer_id: int):
    response = client.post(
        "/v1/loans",
        json={
            "client_id": client_id,
            "gold_item_ids": [gold_item_id],
            "financing_ratio": 0.9,
            "profit_rate": 5,
            "term_months": 12,
            "payment_frequency": "monthly",
            "created_by": officer_id,
        },
    )
    assert response.status_code == 422


def test_inconsistent_amounts_are_400(client: TestClient, client_id: int, gold_item_id: int, officer_id: int):
    response = client.post(
        "/v1/loans",
        json={
            "client_id": client_id,
            "gold_item_ids": [gold_item_id],
            "financing_ratio": 0.70,
            "total_gold_value": "5000",
            "financing_amount": "4000",
            "profit_rate": 5,
            "term_months": 12,
            "payment_frequency": "monthly",
            "created_by": officer_id,
        },
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    assert body["fields"] == ["financing_amount"]


def test_invalid_transition_is_409(client: TestClient, loan_id: int):
    response = client.patch(f"/v1/loans/{loan_id}/status", json={"status": "active"})
    assert response.status_code == 409
    assert client.get(f"/v1/loans/{loan_id}").json()["status"] == "pending"


def test_list_loans_by_status(client: TestClient, loan_id: int, client_id: int):
    assert [found["id"] for found in client.get("/v1/loans", params={"status": "pending"}).json()] == [loan_id]
    assert client.get("/v1/loans", params={"status": "active"}).json() == []
    assert [found["id"] for found in client.get(f"/v1/clients/{client_id}/loans").json()] == [loan_id]


def test_update_loan_terms(client: TestClient, loan_id: int):
    response = client.patch(f"/v1/loans/{loan_id}", json={"financing_ratio": 0.65})

    assert response.status_code == 200
    assert Decimal(response.json()["financing_amount"]) == Decimal("3250.00")


def test_update_loan_rejects_status_field(client: TestClient, loan_id: int):
    response = client.patch(f"/v1/loans/{loan_id}", json={"status": "active"})
    assert response.status_code == 422


@pytest.mark.parametrize("body", [{"shariah_contract_type": None}, {"term_months": None}])
def test_update_loan_null_required_field_is_400(client: TestClient, loan_id: int, body):
    response = client.patch(f"/v1/loans/{loan_id}", json=body)

    assert response.status_code == 400
    assert response.json()["fields"] == list(body)
    assert client.get(f"/v1/loans/{loan_id}").json()["term_months"] == 12
    assert client.get("/v1/loans").status_code == 200


def test_update_client_null_required_field_is_400(client: TestClient, client_id: int):
    response = client.patch(f"/v1/clients/{client_id}", json={"full_name": None})

    assert response.status_code == 400
    assert response.json()["fields"] == ["full_name"]
    assert client.get(f"/v1/clients/{client_id}").json()["full_name"] == "Ahmad bin Ismail"
    assert client.get("/v1/clients").status_code == 200


def test_update_client_clears_optional_field(client: TestClient, client_id: int):
    client.patch(f"/v1/clients/{client_id}", json={"address": "12 Jalan Ampang"})
    response = client.patch(f"/v1/clients/{client_id}", json={"address": None})

    assert response.status_code == 200
    assert response.json()["address"] is None


def test_update_active_loan_terms_is_409(client: TestClient, loan_id: int):
    _activate(client, loan_id)

    response = client.patch(f"/v1/loans/{loan_id}", json={"term_months": 24})

    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransitionError"
    assert client.get(f"/v1/loans/{loan_id}").json()["term_months"] == 12


def test_activation_creates_schedule(client: TestClient, loan_id: int):
    _activate(client, loan_id)

    payments = client.get(f"/v1/loans/{loan_id}/payments").json()
    assert len(payments) == 12
    assert payments[0]["due_date"] == "2025-02-15"
    assert payments[0]["effective_status"] == "pending"
    assert payments[0]["is_overdue"] is False
    assert sum(Decimal(p["amount"]) for p in payments) == Decimal("3675.00")


def test_record_payment_twice_is_409(client: TestClient, loan_id: int):
    _activate(client, loan_id)
    payment_id = client.get(f"/v1/loans/{loan_id}/payments").json()[0]["id"]

    first = client.patch(f"/v1/payments/{payment_id}/status", json={"status": "paid"})
    second = client.patch(f"/v1/payments/{payment_id}/status", json={"status": "paid"})

    assert first.status_code == 200
    assert first.json()["paid_date"] is not None
    assert second.status_code == 409
    assert second.json()["error"] == "AlreadyPaidError"


def test_overdue_flags_on_read(client: TestClient, loan_id: int, clock):
    _activate(client, loan_id)
    clock.advance(40)

    overdue = client.get("/v1/payments/overdue").json()

    assert [p["due_date"] for p in overdue] == ["2025-02-15"]
    assert overdue[0]["status"] == "pending"
    assert overdue[0]["effective_status"] == "overdue"
    assert overdue[0]["is_overdue"] is True


def test_upcoming_and_summary(client: TestClient, loan_id: int, clock):
    _activate(client, loan_id)
    clock.advance(30)

    upcoming = client.get("/v1/payments/upcoming", params={"days": 7}).json()
    summary = client.get("/v1/payments/summary").json()

    assert [p["due_date"] for p in upcoming] == ["2025-02-15"]
    assert summary["upcoming"]["count"] == 1
    assert summary["overdue"]["count"] == 0


def test_reminder_is_queued_for_delivery(client: TestClient, loan_id: int, messaging_client):
    _activate(client, loan_id)
    payment_id = client.get(f"/v1/loans/{loan_id}/payments").json()[0]["id"]

    response = client.post(
        f"/v1/payments/{payment_id}/reminder",
        json={"method": "sms", "message": "Your installment is due soon."},
    )

    assert response.status_code == 202
    assert response.json()["recipient"] == "+60123456789"
    messaging_client.dispatch.assert_called_once()
    reminder = messaging_client.dispatch.call_args.args[0]
    assert reminder.payment_id == payment_id


def test_reminder_message_too_short(client: TestClient, loan_id: int, messaging_client):
    _activate(client, loan_id)
    payment_id = client.get(f"/v1/loans/{loan_id}/payments").json()[0]["id"]

    response = client.post(f"/v1/payments/{payment_id}/reminder", json={"method": "sms", "message": "Pay"})

    assert response.status_code == 422
    messaging_client.dispatch.assert_not_called()


def test_generate_and_download_contract(client: TestClient, loan_id: int):
    created = client.post("/v1/documents/generate", json={"loan_id": loan_id, "template_type": "murabaha"})
    assert created.status_code == 201
    document = created.json()
    assert document["status"] == "approved"

    download = client.get(f"/v1/documents/{document['id']}/download")

    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/html")
    assert f'filename="{document["name"]}.html"' in download.headers["content-disposition"]
    assert "Murabaha Gold Financing Contract" in download.text
    assert "Ahmad bin Ismail" in download.text


def test_contract_template_preview(client: TestClient):
    response = client.get("/v1/contracts/template/musharakah")
    assert response.status_code == 200
    assert "Musharakah Partnership Contract" in response.text
    assert "[Client Name]" in response.text


def test_document_status_flow(client: TestClient, loan_id: int):
    document = client.post(
        "/v1/documents", json={"loan_id": loan_id, "name": "IC copy", "type": "identification"}
    ).json()

    approved = client.patch(f"/v1/documents/{document['id']}/status", json={"status": "approved"})
    reopened = client.patch(f"/v1/documents/{document['id']}/status", json={"status": "pending"})

    assert approved.status_code == 200
    assert reopened.status_code == 409
    assert len(client.get(f"/v1/loans/{loan_id}/documents").json()) == 1


def test_gold_price_endpoints(client: TestClient):
    current = client.get("/v1/gold-price").json()
    assert Decimal(current["price_per_ounce"]) == Decimal("8889.25")

    created = client.post("/v1/gold-price", json={"price_per_ounce": "9050.10"})
    assert created.status_code == 201

    assert Decimal(client.get("/v1/gold-price").json()["price_per_ounce"]) == Decimal("9050.10")
    assert len(client.get("/v1/gold-price/history", params={"days": 30}).json()) == 2


def test_valuation_endpoint(client: TestClient):
    response = client.post(
        "/v1/valuation",
        json={"weight": "100", "purity": 24, "financing_ratio": 0.65, "price_per_ounce": "8889.25"},
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["gold_value"]) == Decimal("28578.94")
    assert Decimal(data["financing_amount"]) == Decimal("18576.31")


def test_valuation_rejects_unknown_purity(client: TestClient):
    response = client.post(
        "/v1/valuation",
        json={"weight": "100", "purity": 21, "financing_ratio": 0.65, "price_per_ounce": "8889.25"},
    )
    assert response.status_code == 400
    assert response.json()["fields"] == ["purity"]


def test_notifications_flow(client: TestClient, loan_id: int, officer_id: int):
    client.patch(f"/v1/loans/{loan_id}/status", json={"status": "verification"})

    unread = client.get(f"/v1/users/{officer_id}/notifications/unread").json()
    assert len(unread) == 1

    read = client.patch(f"/v1/notifications/{unread[0]['id']}/read")
    assert read.json()["status"] == "read"
    assert client.get(f"/v1/users/{officer_id}/notifications/unread").json() == []
    assert len(client.get(f"/v1/users/{officer_id}/notifications").json()) == 1
