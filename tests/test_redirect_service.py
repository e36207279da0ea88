"""
Tests for the redirect decision engine and password verification.
"""

import pytest

from conftest import BROWSER_UA, FACEBOOK_UA, make_request
from zye.api.schemas import LinkMeta, LinkRecord
from zye.core.security import hash_password
from zye.services.preview import FALLBACK_TITLE
from zye.services.redirect_service import PASSWORD_INCORRECT_MESSAGE, ResolutionKind

DESTINATION = "https://example.com/landing"
PAST = "2000-01-01T00:00:00.000+08:00"
FUTURE = "2999-01-01T00:00:00.000+08:00"


def link(**fields) -> LinkRecord:
    fields.setdefault("url", DESTINATION)
    return LinkRecord(**fields)


class TestLookupAndExpiration:
    """Test the lookup and expiration gates."""

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found(self, service, store):
        resolution = await service.resolve("nope42", make_request())

        assert resolution.kind is ResolutionKind.NOT_FOUND
        assert resolution.status_code == 404
        assert "nope42" in resolution.body
        assert store.get_calls == ["nope42"]

    @pytest.mark.asyncio
    async def test_malformed_code_never_reaches_store(self, service, store):
        resolution = await service.resolve("<script>", make_request())

        assert resolution.kind is ResolutionKind.NOT_FOUND
        assert store.get_calls == []
        assert "<script>" not in resolution.body
        assert "&lt;script&gt;" in resolution.body

    @pytest.mark.asyncio
    async def test_expired_link_is_deleted_and_not_found(self, service, store):
        store.records["old123"] = link(exp=PAST)

        resolution = await service.resolve("old123", make_request())

        assert resolution.kind is ResolutionKind.NOT_FOUND
        assert resolution.status_code == 404
        assert "old123" not in store.records
        assert store.delete_calls == ["old123"]

    @pytest.mark.asyncio
    async def test_expired_and_missing_pages_are_identical(self, service, store):
        store.records["gone12"] = link(exp=PAST)

        expired = await service.resolve("gone12", make_request())
        missing = await service.resolve("gone12", make_request())

        assert expired.kind is missing.kind is ResolutionKind.NOT_FOUND
        assert expired.status_code == missing.status_code
        assert expired.body == missing.body
        assert store.delete_calls == ["gone12"]

    @pytest.mark.asyncio
    async def test_expired_password_link_is_not_found(self, service, store):
        store.records["old123"] = link(exp=PAST, password=hash_password("secret"))

        resolution = await service.resolve("old123", make_request(FACEBOOK_UA))

        assert resolution.kind is ResolutionKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_future_expiration_redirects(self, service, store):
        store.records["fresh1"] = link(exp=FUTURE)

        resolution = await service.resolve("fresh1", make_request())

        assert resolution.kind is ResolutionKind.REDIRECT
        assert store.delete_calls == []

    @pytest.mark.asyncio
    async def test_unparsable_expiration_still_resolves(self, service, store):
        store.records["weird1"] = link(exp="someday")

        resolution = await service.resolve("weird1", make_request())

        assert resolution.kind is ResolutionKind.REDIRECT


class TestGates:
    """Test password, preview and redirect gates."""

    @pytest.mark.asyncio
    async def test_plain_link_redirects(self, service, store):
        store.records["abc123"] = link()

        resolution = await service.resolve("abc123", make_request(BROWSER_UA))

        assert resolution.kind is ResolutionKind.REDIRECT
        assert resolution.status_code == 302
        assert resolution.location == DESTINATION

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_agent, query", [
        (BROWSER_UA, {}),
        (FACEBOOK_UA, {}),
        (BROWSER_UA, {"preview": "1"}),
    ])
    async def test_password_gate_applies_to_everyone(self, service, store, fetcher, user_agent, query):
        store.records["locked"] = link(password=hash_password("secret"))

        resolution = await service.resolve("locked", make_request(user_agent, **query))

        assert resolution.kind is ResolutionKind.PASSWORD_REQUIRED
        assert resolution.status_code == 200
        assert 'name="code" value="locked"' in resolution.body
        assert PASSWORD_INCORRECT_MESSAGE not in resolution.body
        assert fetcher.requests == []

    @pytest.mark.asyncio
    async def test_crawler_with_custom_meta_gets_preview_without_fetch(self, service, store, fetcher):
        store.records["promo1"] = link(meta=LinkMeta(title="X & <Y>"))

        resolution = await service.resolve("promo1", make_request(FACEBOOK_UA))

        assert resolution.kind is ResolutionKind.PREVIEW
        assert resolution.status_code == 200
        assert "<title>X &amp; &lt;Y&gt;</title>" in resolution.body
        assert '<meta property="og:title" content="X &amp; &lt;Y&gt;">' in resolution.body
        assert '<meta property="og:url" content="https://zye.me/promo1">' in resolution.body
        assert fetcher.requests == []

    @pytest.mark.asyncio
    async def test_crawler_without_meta_fetches_origin_once(self, service, store, fetcher):
        store.records["plain1"] = link()

        resolution = await service.resolve("plain1", make_request("Twitterbot/1.0"))

        assert resolution.kind is ResolutionKind.PREVIEW
        assert len(fetcher.requests) == 1
        assert str(fetcher.requests[0].url) == DESTINATION
        # The fixture origin answers 503
        assert f"<title>{FALLBACK_TITLE}</title>" in resolution.body
        assert '<meta property="og:description" content="">' in resolution.body

    @pytest.mark.asyncio
    async def test_preview_flag_serves_preview_to_browsers(self, service, store):
        store.records["abc123"] = link(meta=LinkMeta(description="d"))

        resolution = await service.resolve("abc123", make_request(BROWSER_UA, preview="1"))

        assert resolution.kind is ResolutionKind.PREVIEW


class TestVerify:
    """Test the password verification entry point."""

    @pytest.mark.asyncio
    async def test_correct_password_redirects(self, service, store):
        store.records["locked"] = link(password=hash_password("secret"))

        resolution = await service.verify("locked", "secret", make_request())

        assert resolution.kind is ResolutionKind.REDIRECT
        assert resolution.location == DESTINATION

    @pytest.mark.asyncio
    async def test_verified_redirect_matches_passwordless_redirect(self, service, store):
        store.records["locked"] = link(password=hash_password("secret"))
        store.records["open12"] = link()

        verified = await service.verify("locked", "secret", make_request())
        plain = await service.resolve("open12", make_request())

        assert verified.kind is plain.kind is ResolutionKind.REDIRECT
        assert verified.status_code == plain.status_code
        assert verified.location == plain.location

    @pytest.mark.asyncio
    async def test_wrong_password_rerenders_form_with_error(self, service, store):
        store.records["locked"] = link(password=hash_password("secret"))

        resolution = await service.verify("locked", "guess", make_request())

        assert resolution.kind is ResolutionKind.PASSWORD_INCORRECT
        assert resolution.status_code == 200
        assert PASSWORD_INCORRECT_MESSAGE in resolution.body
        assert 'class="error-message"' in resolution.body

    @pytest.mark.asyncio
    async def test_link_without_password_fails_the_gate(self, service, store):
        store.records["open12"] = link()

        resolution = await service.verify("open12", "anything", make_request())

        assert resolution.kind is ResolutionKind.PASSWORD_INCORRECT

    @pytest.mark.asyncio
    async def test_correct_password_from_crawler_gets_preview(self, service, store):
        store.records["locked"] = link(password=hash_password("secret"), meta=LinkMeta(title="T"))

        resolution = await service.verify("locked", "secret", make_request(FACEBOOK_UA))

        assert resolution.kind is ResolutionKind.PREVIEW

    @pytest.mark.asyncio
    async def test_expired_link_is_not_found_even_with_password(self, service, store):
        store.records["locked"] = link(password=hash_password("secret"), exp=PAST)

        resolution = await service.verify("locked", "secret", make_request())

        assert resolution.kind is ResolutionKind.NOT_FOUND
        assert "locked" not in store.records

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found(self, service):
        resolution = await service.verify("nope42", "secret", make_request())

        assert resolution.kind is ResolutionKind.NOT_FOUND


class TestFailures:
    """Test that store failures become generic server errors."""

    @pytest.mark.asyncio
    async def test_store_failure_is_server_error(self, service, store, failing_store_error):
        store.fail_with = failing_store_error

        resolution = await service.resolve("abc123", make_request())

        assert resolution.kind is ResolutionKind.SERVER_ERROR
        assert resolution.status_code == 500
        assert "connection" not in resolution.body

    @pytest.mark.asyncio
    async def test_unexpected_error_is_server_error(self, service, store):
        store.fail_with = RuntimeError("boom")

        resolution = await service.verify("abc123", "pw", make_request())

        assert resolution.kind is ResolutionKind.SERVER_ERROR
        assert "boom" not in resolution.body
