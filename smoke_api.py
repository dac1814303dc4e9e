import requests
import json

BASE_URL = "http://127.0.0.1:8000"

# --- sample trip ---
trip = {
    "id": "smoke-trip",
    "name": "Smoke test",
    "startDate": "2026-07-10",
    "endDate": "2026-07-20",
    "travelers": 2,
    "coordinates": [
        {"name": "Paris", "lat": 48.8566, "lng": 2.3522},
        {"name": "Amsterdam", "lat": 52.3676, "lng": 4.9041},
        {"name": "Berlin", "lat": 52.52, "lng": 13.405},
    ],
    "savedPlaces": [],
}


def post(path, payload):
    url = f"{BASE_URL}{path}"
    print(f"➡️ Sending POST {url}")
    resp = requests.post(url, headers={"Content-Type": "application/json"}, json=payload)
    print(f"⬅️ Status: {resp.status_code}")
    try:
        print(json.dumps(resp.json(), indent=2))
    except Exception:
        print(resp.text)


def run_smoke():
    post("/api/flights/timing", {"origin": "New York, NY", "destination": "Paris", "tripStartDate": "2026-07-10"})
    post("/api/flights/plan", {"trip": trip, "origin": "New York, NY"})
    post("/api/itinerary", {"trip": trip, "preferences": {"preferred_transport": "transit"}})


if __name__ == "__main__":
    run_smoke()
