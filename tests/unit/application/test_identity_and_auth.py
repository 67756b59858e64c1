"""
Unit tests for session tokens, identity resolution and the auth service.
"""

from datetime import timedelta

import jwt
import pytest

from linkdrop.application import Identity, SessionTokenService
from linkdrop.application.identity_resolver import bearer_token
from linkdrop.domain.accounts import Account
from linkdrop.domain.errors import (
    AccountExistsError,
    AuthenticationError,
    ValidationError,
)

from tests.conftest import TEST_SECRET


@pytest.fixture
def account():
    return Account.create("alice@example.com", "correct horse")


class TestSessionTokens:
    def test_issue_and_verify(self, session_tokens, account):
        claims = session_tokens.verify(session_tokens.issue(account))
        assert claims.account_id == account.id
        assert claims.email == "alice@example.com"

    def test_expired_token_rejected(self, session_tokens, account, clock):
        token = session_tokens.issue(account)
        clock.advance(hours=24, seconds=1)
        with pytest.raises(AuthenticationError):
            session_tokens.verify(token)

    def test_forged_token_rejected(self, session_tokens, account, clock):
        forged = SessionTokenService("another-secret-0123456789abcdef", clock=clock).issue(account)
        with pytest.raises(AuthenticationError):
            session_tokens.verify(forged)

    def test_wrong_token_type_rejected(self, session_tokens, clock):
        token = jwt.encode(
            {"sub": "x", "exp": int((clock() + timedelta(hours=1)).timestamp()), "type": "capability"},
            TEST_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            session_tokens.verify(token)

    @pytest.mark.parametrize("token", [None, "", "not.a.jwt"])
    def test_garbage_rejected(self, session_tokens, token):
        with pytest.raises(AuthenticationError):
            session_tokens.verify(token)

    def test_secret_required(self):
        with pytest.raises(ValueError):
            SessionTokenService("")


class TestIdentityResolver:
    def test_bearer_token_wins(self, identity_resolver, session_tokens, account):
        token = session_tokens.issue(account)
        identity = identity_resolver.resolve(
            authorization=f"Bearer {token}", guest_id="visitor-0001"
        )
        assert identity == Identity.for_account(account.id, account.email)
        assert identity.owner_id == f"user:{account.id}"
        assert not identity.is_guest

    def test_cookie_token(self, identity_resolver, session_tokens, account):
        identity = identity_resolver.resolve(session_cookie=session_tokens.issue(account))
        assert identity.account_id == account.id

    def test_invalid_token_falls_back_to_guest(self, identity_resolver):
        identity = identity_resolver.resolve(authorization="Bearer junk", guest_id="visitor-0001")
        assert identity == Identity.for_guest("visitor-0001")
        assert identity.owner_id == "guest:visitor-0001"

    @pytest.mark.parametrize("guest_id", ["short", "has space in it", "x" * 65, "semi;colon1"])
    def test_malformed_guest_id_is_anonymous(self, identity_resolver, guest_id):
        assert identity_resolver.resolve(guest_id=guest_id) is None

    def test_nothing_is_anonymous(self, identity_resolver):
        assert identity_resolver.resolve() is None

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc", "abc"),
        ("bearer  abc ", "abc"),
        ("Basic abc", None),
        ("Bearer", None),
        (None, None),
    ])
    def test_bearer_parsing(self, header, expected):
        assert bearer_token(header) == expected


class TestAuthService:
    def test_register_then_login(self, auth_service, session_tokens):
        registered = auth_service.register("Alice@Example.com", "correct horse")
        logged_in = auth_service.login("alice@example.com", "correct horse")

        assert registered.account.id == logged_in.account.id
        assert session_tokens.verify(logged_in.token).account_id == registered.account.id
        assert set(logged_in.to_dict()) == {"id", "email", "token"}

    def test_duplicate_email(self, auth_service):
        auth_service.register("alice@example.com", "correct horse")
        with pytest.raises(AccountExistsError):
            auth_service.register("ALICE@example.com", "another password")

    def test_register_validates(self, auth_service):
        with pytest.raises(ValidationError):
            auth_service.register("not-an-email", "correct horse")
        with pytest.raises(ValidationError):
            auth_service.register("bob@example.com", None)

    @pytest.mark.parametrize("email,password", [
        ("alice@example.com", "wrong horse"),
        ("nobody@example.com", "correct horse"),
        ("garbage", "correct horse"),
        ("alice@example.com", None),
    ])
    def test_login_failures(self, auth_service, email, password):
        auth_service.register("alice@example.com", "correct horse")
        with pytest.raises(AuthenticationError):
            auth_service.login(email, password)
