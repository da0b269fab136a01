"""Tests for the payment gateway webhook."""

import json
import time

import pytest

from medislot.webhook_security import create_webhook_signature, verify_timestamp
from tests.conftest import auth_headers

SECRET = "whsec-test"


def signed(payload: dict, secret: str = SECRET, timestamp: str = None):
    body = json.dumps(payload).encode("utf-8")
    timestamp = timestamp or str(int(time.time()))
    headers = {
        "Content-Type": "application/json",
        "X-Signature": create_webhook_signature(secret, body, timestamp),
        "X-Timestamp": timestamp,
    }
    return body, headers


@pytest.fixture
def appointment_id(client, doctor, patient, next_monday) -> int:
    response = client.post(
        "/appointments",
        json={"doctor_id": doctor.id, "appointment_date": next_monday.isoformat(), "slot": "10:00"},
        headers=auth_headers(patient.user),
    )
    assert response.status_code == 201
    return response.json()["id"]


def send(client, payload: dict, **kwargs):
    body, headers = signed(payload, **kwargs)
    return client.post("/payments/webhook", content=body, headers=headers)


class TestWebhookSignature:
    def test_unsigned_request_is_rejected(self, client, appointment_id):
        response = client.post(
            "/payments/webhook",
            json={"event": "payment.succeeded", "appointment_id": appointment_id},
        )

        assert response.status_code == 401

    def test_wrong_secret_is_rejected(self, client, appointment_id):
        response = send(
            client,
            {"event": "payment.succeeded", "appointment_id": appointment_id},
            secret="someone-else",
        )

        assert response.status_code == 401

    def test_stale_timestamp_is_rejected(self, client, appointment_id):
        response = send(
            client,
            {"event": "payment.succeeded", "appointment_id": appointment_id},
            timestamp=str(int(time.time()) - 3600),
        )

        assert response.status_code == 401

    def test_verify_timestamp(self):
        assert verify_timestamp(str(int(time.time())))
        assert not verify_timestamp("yesterday")
        assert not verify_timestamp(None)


class TestWebhookEvents:
    def test_success_books_appointment(self, client, appointment_id, patient):
        response = send(
            client,
            {
                "event": "payment.succeeded",
                "appointment_id": appointment_id,
                "transaction_id": "txn_123",
                "payment_method": "card",
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "received": True,
            "appointment_id": appointment_id,
            "appointment_status": "booked",
            "payment_status": "paid",
        }

        payment = client.get(
            f"/payments/appointments/{appointment_id}", headers=auth_headers(patient.user)
        ).json()
        assert payment["transaction_id"] == "txn_123"
        assert payment["amount"] == 50.0

    def test_repeated_success_is_idempotent(self, client, appointment_id):
        payload = {"event": "payment.succeeded", "appointment_id": appointment_id}

        send(client, payload)
        response = send(client, payload)

        assert response.status_code == 200
        assert response.json()["appointment_status"] == "booked"

    def test_failure_keeps_appointment_pending(self, client, appointment_id):
        response = send(client, {"event": "payment.failed", "appointment_id": appointment_id})

        assert response.status_code == 200
        assert response.json()["appointment_status"] == "pending"
        assert response.json()["payment_status"] == "failed"

    def test_failure_after_success_is_refused(self, client, appointment_id):
        send(client, {"event": "payment.succeeded", "appointment_id": appointment_id})

        response = send(client, {"event": "payment.failed", "appointment_id": appointment_id})

        assert response.status_code == 403

    def test_paid_appointment_is_locked_for_patient(self, client, appointment_id, patient):
        send(client, {"event": "payment.succeeded", "appointment_id": appointment_id})

        response = client.delete(f"/appointments/{appointment_id}", headers=auth_headers(patient.user))

        assert response.status_code == 403
        assert response.json()["detail"]["message"] == (
            "Appointment is already paid. Please contact support to change it."
        )

    def test_unknown_appointment(self, client):
        response = send(client, {"event": "payment.succeeded", "appointment_id": 9999})

        assert response.status_code == 404

    def test_unknown_event(self, client, appointment_id):
        response = send(client, {"event": "payment.refunded", "appointment_id": appointment_id})

        assert response.status_code == 422


class TestPaymentLookup:
    def test_foreign_patient_cannot_read_payment(self, client, appointment_id, other_patient):
        response = client.get(
            f"/payments/appointments/{appointment_id}", headers=auth_headers(other_patient.user)
        )

        assert response.status_code == 403
