"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags throughput   # Test cache and search
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import random
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events

# Shared state
CONCURRENCY_CAR_ID = None
CAR_IDS = []


def random_email():
    return f"load_{random.randint(10000, 99999)}@example.com"


def random_window(max_start_days: int = 60, max_length: int = 4):
    start = date(2030, 1, 1) + timedelta(days=random.randint(0, max_start_days))
    end = start + timedelta(days=random.randint(0, max_length))
    return start.isoformat(), end.isoformat()


def login(client) -> dict:
    resp = client.post("/api/v1/auth/jwt", json={"email": random_email()})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print("SETUP: first ConcurrencyUser creates the contested car")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many renters, one car, overlapping dates

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify no two active bookings overlap:
      SELECT a.id, b.id FROM bookings a JOIN bookings b
        ON a.car_id = b.car_id AND a.id < b.id
       AND a.status IN ('pending', 'confirmed') AND b.status IN ('pending', 'confirmed')
       AND a.start_date <= b.end_date AND a.end_date >= b.start_date
       WHERE a.car_id = X;
    Should return no rows.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = login(self.client)
        if self.headers and not CONCURRENCY_CAR_ID:
            resp = self.client.post(
                "/api/v1/cars/",
                json={"model": "Concurrency Test Car", "daily_price": 50, "branch": "DAC"},
                headers=self.headers,
            )
            if resp.status_code == 201:
                globals()["CONCURRENCY_CAR_ID"] = resp.json()["id"]
                CAR_IDS.append(CONCURRENCY_CAR_ID)
                print(f"\n✓ Created car {CONCURRENCY_CAR_ID}\n")

    @tag("concurrency")
    @task
    def book_contested_car(self):
        """All users fight for the same 30-day window of one car."""
        if not CONCURRENCY_CAR_ID or not self.headers:
            return

        start, end = random_window(max_start_days=30)
        with self.client.post(
            "/api/v1/bookings/",
            json={"car_id": CONCURRENCY_CAR_ID, "start_date": start, "end_date": end},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409 expected: dates taken
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - listing cache and search

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_cars_cached(self):
        branch = random.choice(["DAC", "CTG", "SYL", None])
        params = {"branch": branch} if branch else {}
        self.client.get("/api/v1/cars/", params=params, name="/api/v1/cars/ [cached]")

    @tag("throughput", "read")
    @task(5)
    def search(self):
        start, end = random_window()
        self.client.get(
            "/api/v1/search",
            params={"from": start, "to": end, "promo": random.choice(["SAVE10", "", "WEEKEND5"])},
            name="/api/v1/search",
        )

    @tag("throughput", "read")
    @task(3)
    def availability(self):
        if CAR_IDS:
            start, end = random_window()
            self.client.get(
                f"/api/v1/cars/{random.choice(CAR_IDS)}/availability",
                params={"from": start, "to": end},
                name="/api/v1/cars/{id}/availability",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = login(self.client)

    @tag("edge")
    @task
    def invalid_car_id(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"car_id": 999999, "start_date": "2030-01-01", "end_date": "2030-01-02"},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in [404, 400]:
                resp.success()
            else:
                resp.failure(f"Expected 404/400, got {resp.status_code}")

    @tag("edge")
    @task
    def reversed_range(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"car_id": 1, "start_date": "2030-01-05", "end_date": "2030-01-01"},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in [400, 404]:
                resp.success()
            else:
                resp.failure(f"Expected 400/404, got {resp.status_code}")

    @tag("edge")
    @task
    def garbage_dates(self):
        with self.client.get(
            "/api/v1/search",
            params={"from": "tomorrow", "to": "later"},
            catch_response=True,
        ) as resp:
            if resp.status_code == 422:
                resp.success()
            else:
                resp.failure(f"Expected 422, got {resp.status_code}")

    @tag("edge")
    @task
    def missing_token(self):
        with self.client.get("/api/v1/bookings/", catch_response=True) as resp:
            if resp.status_code == 401:
                resp.success()
            else:
                resp.failure(f"Expected 401, got {resp.status_code}")
