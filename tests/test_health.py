"""Tests for the liveness probe and the keep-alive pinger."""

import httpx

from utils.keep_alive import ping_once, run


class TestPing:
    def test_alive(self, client):
        response = client.get("/ping")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "alive"
        assert "timestamp" in body


class TestKeepAlive:
    def test_run_pings_and_sleeps_between(self):
        hits = []

        def handler(request):
            hits.append(str(request.url))
            return httpx.Response(200, json={"status": "alive"})

        sleeps = []
        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            ok = run("https://api.example/ping", 60, client=client, sleep=sleeps.append, max_pings=3)

        assert ok == 3
        assert len(hits) == 3
        assert sleeps == [60, 60]

    def test_failure_does_not_raise(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            assert ping_once(client, "https://api.example/ping") is False

    def test_non_200_is_failure(self):
        with httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(503))) as client:
            assert ping_once(client, "https://api.example/ping") is False
