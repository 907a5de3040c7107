"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags burst      # Concurrent purchases, unique references
  locust -f locustfile.py --tags reports    # Admin report reads
  locust -f locustfile.py --tags edge       # Test bad input
  locust -f locustfile.py                   # All tests

Environment:
  LEDGER_MATCH_ID     match to book against (default 1)
  LEDGER_ADMIN_TOKEN  bearer token with an admin role, for the report scenario
"""

import os
import random
import string
import uuid

from locust import HttpUser, task, between, tag, events

MATCH_ID = int(os.environ.get("LEDGER_MATCH_ID", "1"))
ADMIN_TOKEN = os.environ.get("LEDGER_ADMIN_TOKEN", "")
TICKET_TYPES = ["vip", "regular", "student"]

# Shared state
REFERENCES = []


def random_email():
    suffix = "".join(random.choices(string.ascii_lowercase, k=8))
    return f"load_{suffix}@test.com"


def booking_body(**overrides):
    body = {
        "match_id": MATCH_ID,
        "customer_name": "Load Tester",
        "customer_email": random_email(),
        "customer_phone": "+254700000000",
        "ticket_type": random.choice(TICKET_TYPES),
        "quantity": random.randint(1, 4),
    }
    body.update(overrides)
    return body


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Booking burst against match {MATCH_ID}")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Every successful purchase must have received its own reference."""
    duplicates = len(REFERENCES) - len(set(REFERENCES))
    print(f"\nBookings created: {len(REFERENCES)}, duplicate references: {duplicates}\n")


class BurstUser(HttpUser):
    """
    TEST 1: Burst - many buyers hitting the same match at once

    Run: locust -f locustfile.py --tags burst -u 200 -r 100 --run-time 30s

    After test, verify:
      SELECT booking_reference, COUNT(*) FROM bookings
      GROUP BY booking_reference HAVING COUNT(*) > 1;
    Should return no rows
    """
    wait_time = between(0, 0.1)

    @tag("burst")
    @task(10)
    def buy_tickets(self):
        with self.client.post("/api/bookings", json=booking_body(), catch_response=True) as resp:
            if resp.status_code == 201:
                REFERENCES.append(resp.json()["data"]["booking_reference"])
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("burst")
    @task(2)
    def retry_with_idempotency_key(self):
        """Same key twice: the second response must replay the first."""
        headers = {"Idempotency-Key": uuid.uuid4().hex}
        body = booking_body()
        first = self.client.post("/api/bookings", json=body, headers=headers, name="/api/bookings [idempotent]")
        with self.client.post(
            "/api/bookings",
            json=body,
            headers=headers,
            name="/api/bookings [replay]",
            catch_response=True,
        ) as resp:
            if first.status_code != 201:
                resp.failure(f"First attempt failed: {first.status_code}")
            elif resp.json() != first.json():
                # Redis disabled: both went to the database
                resp.failure("Replay created a second booking")
            else:
                REFERENCES.append(first.json()["data"]["booking_reference"])
                resp.success()


class ReportUser(HttpUser):
    """
    TEST 2: Reports - aggregates computed on every read

    Run: LEDGER_ADMIN_TOKEN=... locust -f locustfile.py --tags reports -u 20 -r 5 --run-time 60s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = {"Authorization": f"Bearer {ADMIN_TOKEN}"} if ADMIN_TOKEN else {}

    @tag("reports")
    @task(5)
    def dashboard(self):
        if self.headers:
            self.client.get("/api/admin/dashboard/stats", headers=self.headers)

    @tag("reports")
    @task(3)
    def revenue_summary(self):
        if self.headers:
            self.client.get("/api/admin/revenue/summary", headers=self.headers)

    @tag("reports")
    @task(2)
    def revenue_by_match(self):
        if self.headers:
            self.client.get("/api/admin/bookings/revenue-by-match", headers=self.headers)

    @tag("reports")
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

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_match(self):
        with self.client.post("/api/bookings", json=booking_body(match_id=999999), catch_response=True) as resp:
            self._expect(resp, [404])

    @tag("edge")
    @task
    def zero_quantity(self):
        with self.client.post("/api/bookings", json=booking_body(quantity=0), catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def huge_quantity(self):
        with self.client.post("/api/bookings", json=booking_body(quantity=999999), catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def unknown_ticket_type(self):
        with self.client.post("/api/bookings", json=booking_body(ticket_type="box"), catch_response=True) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/bookings",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def admin_without_token(self):
        with self.client.get("/api/admin/bookings", catch_response=True) as resp:
            self._expect(resp, [401])
