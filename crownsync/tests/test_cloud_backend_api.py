"""
Tests for the backend HTTP client in CrownSync

Requests are intercepted with unittest.mock; no network access.
"""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from crownsync.api import CloudBackendAPI, is_org_write_role, parse_timestamp
from crownsync.exceptions import CrownSyncAuthError, CrownSyncTransportError


def _response(status_code=200, data=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = data
    return response


def _logged_in_api(role="coach"):
    api = CloudBackendAPI("https://backend.example/api/", verify_ssl=False, timeout=5)
    login_response = _response(200, {
        "accessToken": "abc123",
        "expiresIn": 3600,
        "user": {"name": "Ana", "teamName": "Club", "role": role}
    })
    with patch.object(api.session, "post", return_value=login_response):
        api.login("ana@example.com", "secret")
    return api


def test_login_stores_token_and_role():
    """Test a successful login"""
    api = _logged_in_api(role="Coach")

    assert api.base_url == "https://backend.example/api"
    assert api.token == "abc123"
    assert api.is_authenticated
    assert api.team_name == "Club"
    assert api.can_write_remote_library

    api.logout()
    assert not api.is_authenticated
    assert not api.can_write_remote_library

    print("Login tests passed")


def test_login_rejected():
    """Test invalid credentials raise an auth error"""
    api = CloudBackendAPI("https://backend.example/api")
    with patch.object(api.session, "post", return_value=_response(401, {"error": "bad"})):
        with pytest.raises(CrownSyncAuthError):
            api.login("ana@example.com", "wrong")
    assert not api.is_authenticated

    print("Login rejection tests passed")


def test_write_roles():
    """Test role based write permission"""
    assert is_org_write_role("admin_org")
    assert is_org_write_role("ORG_ADMIN")
    assert is_org_write_role(" coach ")
    assert not is_org_write_role("athlete")
    assert not is_org_write_role(None)

    print("Role tests passed")


def test_list_files_parses_page():
    """Test listing JSON is converted into descriptors"""
    api = _logged_in_api()
    page = _response(200, {
        "files": [
            {"key": "CrownRFEP/sessions/1/videos/10.mp4", "size": 2048,
             "lastModified": "2024-05-01T10:00:00Z", "isFolder": False},
            {"key": "sessions/1/", "isFolder": True},
        ],
        "continuationToken": "next-page",
        "hasMore": True
    })

    with patch.object(api.session, "request", return_value=page) as request:
        listing = api.list_files("sessions/", 500, "token-1")

    args, kwargs = request.call_args
    assert args == ("GET", "https://backend.example/api/files/list")
    assert kwargs["params"] == {"path": "sessions/", "max": 500, "token": "token-1"}
    assert kwargs["headers"]["Authorization"] == "Bearer abc123"
    assert kwargs["timeout"] == 5

    assert listing.has_more
    assert listing.continuation_token == "next-page"
    assert listing.files[0].key == "sessions/1/videos/10.mp4"
    assert listing.files[0].size == 2048
    assert listing.files[0].last_modified_utc == 1714557600
    assert listing.files[1].is_folder

    print("Listing tests passed")


def test_request_errors_are_mapped():
    """Test 401, 5xx and connection failures"""
    api = _logged_in_api()

    with patch.object(api.session, "request", return_value=_response(500, {"error": "boom"})):
        with pytest.raises(CrownSyncTransportError):
            api.list_files("sessions/")

    with patch.object(api.session, "request", side_effect=requests.exceptions.ConnectionError("down")):
        with pytest.raises(CrownSyncTransportError):
            api.get_signed_download_url("sessions/1/session.json")

    with patch.object(api.session, "request", return_value=_response(401)):
        with pytest.raises(CrownSyncAuthError):
            api.list_files("sessions/")
    assert not api.is_authenticated

    with pytest.raises(CrownSyncAuthError):
        api.list_files("sessions/")

    print("Error mapping tests passed")


def test_signed_download_url():
    """Test the signed URL request body"""
    api = _logged_in_api()
    with patch.object(api.session, "request", return_value=_response(200, {"url": "https://signed"})) as request:
        url = api.get_signed_download_url("sessions/1/metadata/10.json", 10)

    assert url == "https://signed"
    assert request.call_args[1]["json"] == {"path": "sessions/1/metadata/10.json", "expirationMinutes": 10}

    with patch.object(api.session, "request", return_value=_response(200, {})):
        with pytest.raises(CrownSyncTransportError):
            api.get_signed_download_url("sessions/1/metadata/10.json")

    print("Signed URL tests passed")


def test_delete_file_guards():
    """Test unsafe keys are refused without contacting the backend"""
    api = _logged_in_api()

    with patch.object(api.session, "request", return_value=_response(200, {"success": True})) as request:
        assert not api.delete_file("")
        assert not api.delete_file("sessions/1/notes.txt")
        assert not api.delete_file("sessions/video.mp4")
        request.assert_not_called()

        assert api.delete_file("sessions/1/videos/10.mp4")
        assert request.call_args[1]["json"] == {"path": "sessions/1/videos/10.mp4"}

    with patch.object(api.session, "request", return_value=_response(404, {"error": "missing"})):
        assert not api.delete_file("sessions/1/videos/10.mp4")

    print("Delete guard tests passed")


def test_parse_timestamp():
    """Test listing timestamp conversion"""
    assert parse_timestamp("2024-05-01T00:00:00Z") == 1714521600
    assert parse_timestamp("2024-05-01T02:00:00+02:00") == 1714521600
    assert parse_timestamp(1714521600) == 1714521600
    assert parse_timestamp(None) == 0
    assert parse_timestamp("yesterday") == 0

    print("Timestamp tests passed")


if __name__ == "__main__":
    print("Running backend API tests...")
    print()

    test_login_stores_token_and_role()
    test_login_rejected()
    test_write_roles()
    test_list_files_parses_page()
    test_request_errors_are_mapped()
    test_signed_download_url()
    test_delete_file_guards()
    test_parse_timestamp()

    print()
    print("All tests passed!")
