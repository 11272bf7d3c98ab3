from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.core.exceptions import AuthenticationError, UpstreamError
from app.core.roles import Capability, Role, has_capability
from app.main import app
from app.services.identity_client import IdentityClient


def _response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_get_user_maps_metadata_role():
    client = IdentityClient(base_url="http://auth.local/", api_key="anon")
    payload = {"id": "abc", "email": "a@example.com", "user_metadata": {"role": "nsight_admin"}}
    with patch("app.services.identity_client.httpx.get", return_value=_response(200, payload)) as get:
        principal = client.get_user("tok")

    assert principal.id == "abc"
    assert principal.role == Role.NSIGHT_ADMIN
    url = get.call_args.args[0]
    headers = get.call_args.kwargs["headers"]
    assert url == "http://auth.local/auth/v1/user"
    assert headers == {"Authorization": "Bearer tok", "apikey": "anon"}


def test_unknown_role_defaults_to_user():
    client = IdentityClient(base_url="http://auth.local")
    payload = {"id": "abc", "user_metadata": {"role": "Admin"}}
    with patch("app.services.identity_client.httpx.get", return_value=_response(200, payload)):
        assert client.get_user("tok").role == Role.USER


@pytest.mark.parametrize("status_code", [401, 403])
def test_rejected_token(status_code):
    client = IdentityClient(base_url="http://auth.local")
    with patch("app.services.identity_client.httpx.get", return_value=_response(status_code)):
        with pytest.raises(AuthenticationError):
            client.get_user("bad")


def test_provider_failure_is_upstream_error():
    client = IdentityClient(base_url="http://auth.local")
    with patch("app.services.identity_client.httpx.get", return_value=_response(502)):
        with pytest.raises(UpstreamError):
            client.get_user("tok")
    with patch("app.services.identity_client.httpx.get", side_effect=httpx.ConnectError("refused")):
        with pytest.raises(UpstreamError):
            client.get_user("tok")


def test_capability_table():
    for role in (Role.CAPACITY_ADMIN, Role.NSIGHT_ADMIN):
        assert all(has_capability(role, cap) for cap in Capability)
    assert not any(has_capability(Role.USER, cap) for cap in Capability)
    assert Role.parse(None) == Role.USER
    assert Role.parse(" Capacity_Admin ") == Role.CAPACITY_ADMIN


def test_bearer_token_flows_through_identity_client(db, seed):
    def override_get_db():
        yield db

    app.dependency_overrides[deps.get_db] = override_get_db
    payload = {"id": "sb-1", "email": "admin@example.com", "user_metadata": {"role": "capacity_admin"}}
    try:
        with patch("app.services.identity_client.httpx.get", return_value=_response(200, payload)):
            client = TestClient(app, raise_server_exceptions=False)
            ok = client.get("/api/resources/pending", headers={"Authorization": "Bearer good"})
        assert ok.status_code == 200

        with patch("app.services.identity_client.httpx.get", return_value=_response(401)):
            denied = client.get("/api/resources/pending", headers={"Authorization": "Bearer bad"})
        assert denied.status_code == 401
        assert denied.json()["error"] == "Invalid or expired token"

        assert client.get("/api/resources/pending").status_code == 401
    finally:
        app.dependency_overrides.clear()
