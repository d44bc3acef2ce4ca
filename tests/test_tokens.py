"""Tests for bearer token issuance and verification."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from taskforge.config import get_settings
from taskforge.services.tokens import (
    TokenFailure,
    TokenService,
    TokenVerificationError,
    get_token_service,
)

SECRET = "unit-test-secret"
T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    replacement = "A" if signature[0] != "A" else "B"
    return ".".join([header, payload, replacement + signature[1:]])


def raw_token(claims: dict, secret: str = SECRET, algorithm: str = "HS256") -> str:
    return jwt.encode(claims, secret, algorithm=algorithm)


def reason_of(service: TokenService, token: str) -> TokenFailure:
    with pytest.raises(TokenVerificationError) as exc_info:
        service.verify(token)
    return exc_info.value.reason


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(clock: FakeClock) -> TokenService:
    return TokenService(secret=SECRET, lifetime=timedelta(hours=8), clock=clock)


class TestTokenServiceConstruction:
    """Test constructor guards."""

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret="")

    def test_sub_second_lifetime_rejected(self):
        with pytest.raises(ValueError):
            TokenService(secret=SECRET, lifetime=timedelta(milliseconds=500))

    def test_lifetime_is_exposed(self):
        assert TokenService(secret=SECRET, lifetime=timedelta(hours=2)).lifetime == timedelta(hours=2)


class TestProcessWideService:
    """Test the settings-backed instance."""

    @pytest.fixture
    def fresh_caches(self):
        get_settings.cache_clear()
        get_token_service.cache_clear()
        yield
        get_settings.cache_clear()
        get_token_service.cache_clear()

    def test_built_from_settings(self, monkeypatch, fresh_caches):
        monkeypatch.setenv("JWT_SECRET", "settings-secret")
        monkeypatch.setenv("JWT_EXPIRATION_HOURS", "3")

        service = get_token_service()

        assert service.lifetime == timedelta(hours=3)
        assert service is get_token_service()
        assert service.verify(service.issue(9).token) == 9

    def test_missing_secret_rejected(self, monkeypatch, fresh_caches):
        monkeypatch.setenv("JWT_SECRET", "")

        with pytest.raises(ValueError):
            get_token_service()


class TestIssue:
    """Test token issuance."""

    def test_round_trip(self, service: TokenService):
        """verify(issue(subject)) returns the subject."""
        issued = service.issue(42)
        assert service.verify(issued.token) == 42

    def test_claims_window(self, service: TokenService):
        """Expiry is exactly one lifetime after issue, so strictly later."""
        issued = service.issue(7)

        assert issued.claims.subject_id == 7
        assert issued.claims.issued_at == T0
        assert issued.expires_at == T0 + timedelta(hours=8)
        assert issued.claims.expires_at > issued.claims.issued_at

    def test_payload_shape(self, service: TokenService):
        """The payload carries sub/iat/exp only, with sub as a string."""
        issued = service.issue(7)
        payload = jwt.get_unverified_claims(issued.token)

        assert payload == {
            "sub": "7",
            "iat": int(T0.timestamp()),
            "exp": int((T0 + timedelta(hours=8)).timestamp()),
        }

    def test_decode_returns_claims(self, service: TokenService):
        issued = service.issue(3)
        assert service.decode(issued.token) == issued.claims


class TestExpiry:
    """Test time-bounded validity."""

    def test_valid_until_just_before_expiry(self, service: TokenService, clock: FakeClock):
        token = service.issue(1).token
        clock.advance(timedelta(hours=8) - timedelta(seconds=1))

        assert service.verify(token) == 1

    def test_expired_at_exact_expiry(self, service: TokenService, clock: FakeClock):
        """now >= exp is expired."""
        token = service.issue(1).token
        clock.advance(timedelta(hours=8))

        assert reason_of(service, token) == TokenFailure.EXPIRED

    def test_expired_long_after(self, service: TokenService, clock: FakeClock):
        token = service.issue(1).token
        clock.advance(timedelta(days=30))

        assert reason_of(service, token) == TokenFailure.EXPIRED

    def test_expired_regardless_of_signature(self, service: TokenService, clock: FakeClock):
        token = tamper_signature(service.issue(1).token)
        clock.advance(timedelta(hours=9))

        assert reason_of(service, token) == TokenFailure.EXPIRED

    def test_token_from_the_past_is_expired(self):
        """A token issued by a past clock is rejected by a live service."""
        past = TokenService(
            secret=SECRET,
            lifetime=timedelta(hours=1),
            clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
        )
        live = TokenService(secret=SECRET, lifetime=timedelta(hours=1))

        assert reason_of(live, past.issue(5).token) == TokenFailure.EXPIRED


class TestSignature:
    """Test signature checks."""

    def test_tampered_signature(self, service: TokenService):
        token = tamper_signature(service.issue(1).token)
        assert reason_of(service, token) == TokenFailure.BAD_SIGNATURE

    def test_tampered_payload(self, service: TokenService):
        """Swapping in another subject breaks the signature."""
        header, _, signature = service.issue(1).token.split(".")
        _, forged_payload, _ = raw_token(
            {"sub": "2", "iat": int(T0.timestamp()), "exp": int(T0.timestamp()) + 3600},
            secret="attacker-secret",
        ).split(".")

        token = ".".join([header, forged_payload, signature])
        assert reason_of(service, token) == TokenFailure.BAD_SIGNATURE

    def test_other_secret(self, service: TokenService, clock: FakeClock):
        other = TokenService(secret="a-completely-different-secret", clock=clock)
        token = other.issue(1).token

        assert reason_of(service, token) == TokenFailure.BAD_SIGNATURE

    def test_other_algorithm(self, service: TokenService):
        """A token signed with a non-configured algorithm is rejected."""
        token = raw_token(
            {"sub": "1", "iat": int(T0.timestamp()), "exp": int(T0.timestamp()) + 3600},
            algorithm="HS512",
        )
        assert reason_of(service, token) == TokenFailure.BAD_SIGNATURE

    def test_services_with_scoped_secrets_do_not_interfere(self, clock: FakeClock):
        first = TokenService(secret="first-secret", clock=clock)
        second = TokenService(secret="second-secret", clock=clock)

        assert first.verify(first.issue(1).token) == 1
        assert second.verify(second.issue(2).token) == 2
        assert reason_of(second, first.issue(1).token) == TokenFailure.BAD_SIGNATURE


class TestMalformed:
    """Test structural checks."""

    @pytest.mark.parametrize(
        "token",
        ["", "garbage", "this.is.not.a.valid.jwt", "a.b", "a.b.c"],
    )
    def test_undecodable_tokens(self, service: TokenService, token: str):
        assert reason_of(service, token) == TokenFailure.MALFORMED

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "alice", "iat": 1767268800, "exp": 1767297600},
            {"sub": 1, "iat": 1767268800, "exp": 1767297600},
            {"sub": "-1", "iat": 1767268800, "exp": 1767297600},
            {"sub": "1", "iat": 1767268800},
            {"sub": "1", "exp": 1767297600},
            {"iat": 1767268800, "exp": 1767297600},
            {"sub": "1", "iat": "yesterday", "exp": 1767297600},
            {"sub": "1", "iat": 1767268800, "exp": True},
        ],
    )
    def test_invalid_claims(self, service: TokenService, claims: dict):
        """Signed tokens with unusable claims are malformed, not accepted."""
        assert reason_of(service, raw_token(claims)) == TokenFailure.MALFORMED

    def test_error_carries_reason_and_message(self, service: TokenService):
        with pytest.raises(TokenVerificationError) as exc_info:
            service.verify("garbage")

        assert exc_info.value.reason == TokenFailure.MALFORMED
        assert str(exc_info.value).startswith("malformed")
