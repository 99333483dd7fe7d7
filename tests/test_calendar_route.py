def test_slots(client):
    response = client.get("/api/v1/calendar/slots")
    assert response.status_code == 200
    slots = response.json()
    assert len(slots) == 6
    assert slots[4] == {"time": "06:00 PM", "label": "Fully Booked", "avail": False}


def test_month_grid(client):
    response = client.get("/api/v1/calendar/2024/2")
    assert response.status_code == 200
    body = response.json()
    assert body["monthLabel"] == "February 2024"
    assert body["emptyDays"] == [None] * 4
    assert body["days"][-1] == 29
    assert body["previous"] == {"year": 2024, "month": 1}
    assert body["next"] == {"year": 2024, "month": 3}


def test_month_grid_wraps_year(client):
    body = client.get("/api/v1/calendar/2025/12").json()
    assert body["next"] == {"year": 2026, "month": 1}
    assert body["emptyDays"] == [None]


def test_month_out_of_range(client):
    assert client.get("/api/v1/calendar/2025/13").status_code == 400


def test_quote(client):
    response = client.post(
        "/api/v1/calendar/quote", json={"vehicle": "sedan", "condition": "used", "modules": {"correction": True}}
    )
    assert response.status_code == 200
    assert response.json() == {"packageName": "Paint Correction Package", "totalPrice": 186}


def test_quote_unknown_vehicle(client):
    response = client.post("/api/v1/calendar/quote", json={"vehicle": "tractor"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid vehicle type: tractor"}


def test_health_and_headers(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


def test_rate_limit_headers(client):
    response = client.get("/api/v1/calendar/slots")
    assert response.headers["RateLimit-Limit"] == "100"
    assert response.headers["RateLimit-Remaining"] == "99"
