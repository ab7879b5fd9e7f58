"""Tests for the session cookie policy."""

from fastapi import Response

from auth import cookies
from core.settings import Settings

DEV = Settings(environment="development")
PROD = Settings(environment="production", cookie_domain=".ekoru.cl")


def test_development_cookies_are_host_only_and_lax():
    params = cookies.cookie_params(DEV, max_age_ms=cookies.ACCESS_COOKIE_MAX_AGE_MS)

    assert params == {
        "httponly": True,
        "secure": False,
        "samesite": "lax",
        "domain": None,
        "path": "/",
        "max_age": 15 * 60,
    }


def test_production_cookies_are_secure_cross_site_and_domain_scoped():
    params = cookies.cookie_params(PROD, max_age_ms=cookies.REFRESH_COOKIE_MAX_AGE_MS)

    assert params["httponly"] is True
    assert params["secure"] is True
    assert params["samesite"] == "none"
    assert params["domain"] == ".ekoru.cl"
    assert params["max_age"] == 7 * 24 * 60 * 60


def test_max_ages_in_milliseconds():
    assert cookies.ACCESS_COOKIE_MAX_AGE_MS == 15 * 60 * 1000
    assert cookies.REFRESH_COOKIE_MAX_AGE_MS == 7 * 24 * 60 * 60 * 1000
    assert cookies.access_cookie("a").max_age_ms == cookies.ACCESS_COOKIE_MAX_AGE_MS
    assert cookies.refresh_cookie("r").key == cookies.REFRESH_COOKIE_NAME


def test_clear_params_omit_max_age():
    params = cookies.clear_cookie_params(PROD)

    assert "max_age" not in params
    assert params["domain"] == ".ekoru.cl"


def test_apply_cookie_writes_set_cookie_header():
    response = Response()

    cookies.apply_cookie(response, cookies.access_cookie("abc"), PROD)

    header = response.headers["set-cookie"]
    assert header.startswith("token=abc;")
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "Max-Age=900" in header
    assert "Domain=.ekoru.cl" in header
    assert "Path=/" in header
    assert "samesite=none" in header.lower()


def test_clear_session_cookies_expires_both_cookies():
    response = Response()

    cookies.clear_session_cookies(response, DEV)

    headers = response.headers.getlist("set-cookie")
    assert len(headers) == 2
    assert headers[0].startswith('token="";')
    assert headers[1].startswith('refreshToken="";')
    assert all("Max-Age=0" in h for h in headers)
