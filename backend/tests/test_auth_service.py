"""
WellNest Backend — Credential Verifier Unit Tests
==================================================

What:  Tests for token issuance/verification, password hashing and login.
How:   Real JWTs signed with the test secret; the account lookup goes through
       the mock session.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

import pytest
from jose import jwt

from app.config import settings
from app.exceptions import AuthenticationError
from app.models.enums import AccountStatus, Permission, Role
from app.services.auth_service import AuthService, hash_password, verify_password
from app.services.authorization import ACCOUNT_NOT_ACTIVE, NOT_AUTHENTICATED


class TestPasswordHashing:

    def test_hash_verifies(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)

    def test_wrong_password_fails(self):
        assert not verify_password("other", hash_password("s3cret-pass"))

    def test_garbage_hash_fails_without_raising(self):
        assert not verify_password("anything", "not-a-hash")


class TestTokens:

    def setup_method(self):
        self.service = AuthService()

    def test_token_carries_identity_claims(self, make_user):
        account = make_user(role=Role.MANAGER)
        token = self.service.create_access_token(account)
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert payload["id"] == str(account.id)
        assert payload["role"] == "manager"
        assert payload["email"] == account.email
        assert payload["exp"] - payload["iat"] == settings.jwt_expire_days * 24 * 3600

    def test_decode_round_trip(self, make_user):
        account = make_user()
        assert self.service.decode_token(self.service.create_access_token(account)) == account.id

    def test_missing_token(self):
        with pytest.raises(AuthenticationError, match=NOT_AUTHENTICATED):
            self.service.decode_token(None)

    def test_expired_token(self, make_user):
        """Issued 31 days ago with a 30 day lifetime."""
        issued = datetime.now(timezone.utc) - timedelta(days=31)
        token = self.service.create_access_token(make_user(), now=issued)
        with pytest.raises(AuthenticationError) as exc_info:
            self.service.decode_token(token)
        assert exc_info.value.message == NOT_AUTHENTICATED

    def test_wrong_signature(self, make_user):
        token = jwt.encode(
            {"id": str(uuid4()), "exp": int(datetime.now(timezone.utc).timestamp()) + 60},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError, match=NOT_AUTHENTICATED):
            self.service.decode_token(token)

    def test_garbled_id_claim(self):
        token = jwt.encode(
            {"id": "not-a-uuid", "exp": int(datetime.now(timezone.utc).timestamp()) + 60},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError, match=NOT_AUTHENTICATED):
            self.service.decode_token(token)

    def test_unset_secret_rejects_everything(self, make_user):
        token = self.service.create_access_token(make_user())
        with patch.object(settings, "jwt_secret", ""):
            with pytest.raises(AuthenticationError, match=NOT_AUTHENTICATED):
                self.service.decode_token(token)


class TestVerifyToken:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_resolves_to_principal(self, mock_db_session, make_user):
        account = make_user(role=Role.STAFF, permissions=[Permission.MANAGE_EVENTS])
        mock_db_session.get.return_value = account

        principal = await self.service.verify_token(
            mock_db_session, self.service.create_access_token(account)
        )

        assert principal.id == account.id
        assert principal.role == Role.STAFF
        assert principal.permissions == [Permission.MANAGE_EVENTS]

    @pytest.mark.asyncio
    async def test_deleted_account(self, mock_db_session, make_user):
        account = make_user()
        mock_db_session.get.return_value = None
        with pytest.raises(AuthenticationError, match="User not found"):
            await self.service.verify_token(
                mock_db_session, self.service.create_access_token(account)
            )

    @pytest.mark.asyncio
    async def test_suspended_account_loses_access_immediately(self, mock_db_session, make_user):
        """A still-valid token is refused once the account is suspended."""
        account = make_user(status=AccountStatus.SUSPENDED)
        mock_db_session.get.return_value = account
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.verify_token(
                mock_db_session, self.service.create_access_token(account)
            )
        assert exc_info.value.message == ACCOUNT_NOT_ACTIVE


class TestAuthenticate:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_successful_login_stamps_last_login(self, mock_db_session, db_result, make_user):
        account = make_user(password_hash=hash_password("correct-horse"))
        mock_db_session.execute.return_value = db_result(scalar=account)

        result = await self.service.authenticate(mock_db_session, account.email.upper(), "correct-horse")

        assert result is account
        assert account.last_login is not None
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=None)
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await self.service.authenticate(mock_db_session, "nobody@wellnest.org", "x")

    @pytest.mark.asyncio
    async def test_wrong_password_same_message(self, mock_db_session, db_result, make_user):
        account = make_user(password_hash=hash_password("correct-horse"))
        mock_db_session.execute.return_value = db_result(scalar=account)
        with pytest.raises(AuthenticationError, match="Invalid email or password"):
            await self.service.authenticate(mock_db_session, account.email, "battery-staple")
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inactive_account(self, mock_db_session, db_result, make_user):
        account = make_user(
            status=AccountStatus.INACTIVE, password_hash=hash_password("correct-horse")
        )
        mock_db_session.execute.return_value = db_result(scalar=account)
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.authenticate(mock_db_session, account.email, "correct-horse")
        assert exc_info.value.message == ACCOUNT_NOT_ACTIVE
