from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from fitsync.config import ApiConfig
from fitsync.services import ApiClient, CredentialStore, FitnessService
from fitsync.state import AppState

BASE_URL = "https://api.test/api"
API_PREFIX = "/api"

USER = {
    "id": "user-1",
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "age": 36,
    "heightCm": 170,
    "currentWeightKg": 62,
    "targetWeightKg": 58,
    "healthGoal": "WEIGHT_LOSS",
    "activityLevel": "MODERATE",
}


class FakeBackend:
    """Routes ``(method, path)`` -> réponse, et garde trace des requêtes reçues."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
        error: type[httpx.TransportError] | None = None,
    ) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if error is not None:
                raise error("backend unreachable", request=request)
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json_body)

        self.routes[(method, path)] = respond

    def on_call(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method, path)] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": f"No route {path}"})
        return route(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def config(tmp_path) -> ApiConfig:
    return ApiConfig(base_url=BASE_URL, timeout=5, credentials_path=str(tmp_path / "credentials.json"))


@pytest.fixture
def store(config) -> CredentialStore:
    return CredentialStore(config.credentials_path)


@pytest.fixture
def expired() -> list[str]:
    return []


@pytest.fixture
def client(config, store, backend):
    with ApiClient(config, store, transport=httpx.MockTransport(backend.handler)) as api:
        yield api


@pytest.fixture
def service(client, store, expired) -> FitnessService:
    return FitnessService(client, store, AppState(), on_session_expired=lambda: expired.append("login"))


@pytest.fixture
def logged_in(service, store) -> FitnessService:
    store.save("token-123", USER)
    service.restore_session()
    return service
