import uuid

import pytest

from notifysvc.middleware import AuthError, check_authorization, new_trace_id


@pytest.fixture(autouse=True)
def _clear_token_env(monkeypatch):
    monkeypatch.delenv("NOTIFYSVC_AUTH_TOKEN", raising=False)


def test_valid_header_returns_token():
    assert check_authorization("Bearer password") == "password"


@pytest.mark.parametrize("header", [None, ""])
def test_missing_header(header):
    with pytest.raises(AuthError, match="Authorization header is required") as info:
        check_authorization(header)
    assert info.value.status_code == 401


@pytest.mark.parametrize("header", ["Basic password", "Bearer", "Bearer  password", "Bearer password extra"])
def test_bad_format(header):
    with pytest.raises(AuthError) as info:
        check_authorization(header)
    assert info.value.message == "Invalid authorization format. Expected 'Bearer <token>'"


def test_wrong_token():
    with pytest.raises(AuthError) as info:
        check_authorization("Bearer token")
    assert info.value.message == "Unauthorized"


def test_token_from_environment(monkeypatch):
    monkeypatch.setenv("NOTIFYSVC_AUTH_TOKEN", "secret")
    assert check_authorization("Bearer secret") == "secret"
    with pytest.raises(AuthError):
        check_authorization("Bearer password")


def test_new_trace_id_is_unique_uuid():
    first, second = new_trace_id(), new_trace_id()
    assert first != second
    assert str(uuid.UUID(first)) == first
    assert uuid.UUID(second).version == 4