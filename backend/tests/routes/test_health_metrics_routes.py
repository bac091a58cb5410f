# backend/tests/routes/test_health_metrics_routes.py
"""Tests for the health check and Prometheus scrape endpoints."""


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "TutorConnect API"
    assert body["site_mode"] == "test"
    assert body["delivery_profile"] == "non_production"


def test_prometheus_metrics_after_booking_activity(client, make_booking, test_teacher):
    booking = make_booking()
    client.post(f"/api/v1/bookings/{booking.id}/approve", headers={"X-User-Id": test_teacher.id})

    response = client.get("/metrics/prometheus")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert 'tutorconnect_booking_transitions_total{action="approve",to_status="approved"}' in text
    assert "tutorconnect_notification_deliveries_total" in text
    assert 'operation="approve_booking"' in text


def test_unknown_route_is_problem_document(client):
    response = client.get("/api/v1/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["title"] == "Not Found"
    assert body["instance"] == "/api/v1/nope"
