from locust import HttpUser, task, between
import os
import json
import time


class PortalUser(HttpUser):
    """Base Locust user that authenticates via JWT before running tasks."""

    abstract = True
    wait_time = between(0.5, 2.5)
    role = "ADVERTISER"

    def on_start(self):
        self.token = None
        self.headers = {"Content-Type": "application/json"}

        email = os.getenv(f"LOCUST_{self.role}_EMAIL")
        password = os.getenv("LOCUST_PASSWORD", "testpass123")

        if email:
            login_payload = json.dumps({"email": email, "password": password})
            with self.client.post(
                "/api/v1/auth/login/",
                data=login_payload,
                headers=self.headers,
                catch_response=True,
            ) as resp:
                if resp.status_code == 200:
                    self.authorize(resp.json().get("access"))
                    resp.success()
                    return

        if self.role == "ADMIN":
            # Admin accounts cannot self-register
            return

        ts = int(time.time() * 1000)
        reg_payload = json.dumps({
            "name": f"Locust {self.role.title()} {ts}",
            "email": f"locust-{self.role.lower()}-{ts}@test.com",
            "password": password,
            "role": self.role,
        })
        with self.client.post(
            "/api/v1/auth/register/",
            data=reg_payload,
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201 and resp.json().get("access"):
                self.authorize(resp.json()["access"])
                resp.success()
            else:
                resp.failure(f"Register failed: {resp.status_code}")

    def authorize(self, token):
        self.token = token
        self.headers["Authorization"] = f"Bearer {self.token}"


class AdvertiserUser(PortalUser):
    role = "ADVERTISER"

    @task(3)
    def list_campaigns(self):
        self.client.get("/api/v1/advertiser/campaigns/", headers=self.headers)

    @task(2)
    def list_creatives(self):
        self.client.get("/api/v1/advertiser/creatives/", headers=self.headers)

    @task(1)
    def list_invoices(self):
        self.client.get("/api/v1/advertiser/billing/invoices/", headers=self.headers)


class PartnerUser(PortalUser):
    role = "PARTNER"

    @task(3)
    def wallet(self):
        self.client.get("/api/v1/partner/wallet/", headers=self.headers)

    @task(2)
    def list_devices(self):
        self.client.get("/api/v1/partner/devices/", headers=self.headers)

    @task(1)
    def notifications(self):
        self.client.get("/api/v1/notifications/", headers=self.headers)


class AdminUser(PortalUser):
    role = "ADMIN"
    weight = 1

    @task(2)
    def revenue(self):
        self.client.get("/api/v1/admin/revenue/?period=monthly", headers=self.headers, name="/api/v1/admin/revenue/")

    @task(2)
    def ai_insights(self):
        self.client.get("/api/v1/admin/ai-insights/", headers=self.headers)

    @task(1)
    def settings(self):
        self.client.get("/api/v1/admin/settings/", headers=self.headers)


# Useful for headless CSV output: `locust --headless -u 50 -r 5 -t 2m -f locustfile.py --csv out --host http://localhost:8070`
