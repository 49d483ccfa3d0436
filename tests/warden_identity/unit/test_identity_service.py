"""Unit tests for IdentityService with mocked collaborators."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from warden_identity.application.ports import ProfileFetcher, SocialProfile
from warden_identity.application.services import IdentityService
from warden_identity.domain.user import Email, User, UserRole
from warden_identity.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginFailedError,
    PasswordChangeFailedError,
    RegistrationFailedError,
    SocialAuthFailedError,
    UserNotFoundError,
    ValidationFailedError,
    WeakPasswordError,
)
from warden_identity.schemas import TokenPair, UserView
from warden_identity.services import PasswordPolicy, StrengthAssessment, TokenAuthority

TEST_NAME = "Test User"
TEST_EMAIL = "test@example.com"
TEST_PASSWORD = "Corr3ct-Horse!Battery"
TEST_HASH = "$2b$04$hashedvalue"
DUMMY_HASH = "$2b$04$dummyvalue"


def make_user(**overrides) -> User:
    values = {
        "name": TEST_NAME,
        "email": TEST_EMAIL,
        "password_hash": TEST_HASH,
        "role": UserRole.CUSTOMER,
    }
    values.update(overrides)
    return User.create(**values)


def make_pair() -> TokenPair:
    return TokenPair(
        access_token="access-token",
        refresh_token="refresh-token",
        access_token_expires_at=datetime(2024, 1, 15, 12, 15, tzinfo=timezone.utc),
        expires_in=900,
    )


class IdentityServiceTestBase:
    def setup_method(self):
        """Set up test fixtures."""
        self.user_repo = AsyncMock()
        self.user_repo.find_by_email.return_value = None
        self.user_repo.find_by_phone.return_value = None

        self.password_policy = Mock(spec=PasswordPolicy)
        self.password_policy.assess_strength.return_value = StrengthAssessment(ok=True)
        self.password_policy.hash.return_value = TEST_HASH
        self.password_policy.verify.return_value = True
        self.password_policy.needs_rehash.return_value = False
        self.password_policy.dummy_hash = DUMMY_HASH

        self.token_authority = Mock(spec=TokenAuthority)
        self.token_authority.issue_pair.return_value = make_pair()

        self.profile_fetcher = Mock(spec=ProfileFetcher)
        self.profile_fetcher.supports.return_value = True
        self.profile_fetcher.fetch_profile = AsyncMock()

        self.service = IdentityService(
            user_repository=self.user_repo,
            password_policy=self.password_policy,
            token_authority=self.token_authority,
            profile_fetcher=self.profile_fetcher,
        )


class TestRegister(IdentityServiceTestBase):
    """Tests for register."""

    @pytest.mark.asyncio
    async def test_register_success(self):
        """Registration stores the user and returns a redacted view plus tokens."""
        result = await self.service.register(TEST_NAME, "Test@Example.com", TEST_PASSWORD)

        self.user_repo.create.assert_called_once()
        created = self.user_repo.create.call_args[0][0]
        assert created.email == TEST_EMAIL
        assert created.password_hash == TEST_HASH
        assert created.role == UserRole.CUSTOMER

        assert isinstance(result.user, UserView)
        assert not hasattr(result.user, "password_hash")
        assert result.user.email == TEST_EMAIL
        assert result.tokens == make_pair()
        self.token_authority.issue_pair.assert_called_once_with(
            created.id, TEST_EMAIL, UserRole.CUSTOMER
        )

    @pytest.mark.asyncio
    async def test_register_sanitizes_name(self):
        """Markup characters are stripped from the display name."""
        await self.service.register("  <b>O'Brien</b> ", TEST_EMAIL, TEST_PASSWORD)

        created = self.user_repo.create.call_args[0][0]
        assert created.name == "bOBrien/b"

    @pytest.mark.asyncio
    async def test_register_uses_configured_default_role(self):
        """Self-registered accounts get the configured role."""
        service = IdentityService(
            user_repository=self.user_repo,
            password_policy=self.password_policy,
            token_authority=self.token_authority,
            default_role=UserRole.RIDER,
        )

        result = await service.register(TEST_NAME, TEST_EMAIL, TEST_PASSWORD)

        assert result.user.role == UserRole.RIDER

    @pytest.mark.asyncio
    async def test_register_collects_all_validation_errors(self):
        """Every field problem is reported at once."""
        self.password_policy.assess_strength.return_value = StrengthAssessment(
            ok=False,
            violations=["Password must contain at least one number"],
        )

        with pytest.raises(ValidationFailedError) as exc_info:
            await self.service.register("", "not-an-email", "weakpass", phone="123")

        errors = exc_info.value.errors
        assert "Name is required" in errors
        assert "Invalid email format" in errors
        assert "Password must contain at least one number" in errors
        assert "Invalid phone number format" in errors
        self.user_repo.create.assert_not_called()
        self.password_policy.hash.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_missing_password(self):
        """An empty password is a validation error."""
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.service.register(TEST_NAME, TEST_EMAIL, "")

        assert exc_info.value.errors == ["Password is required"]

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self):
        """An existing email is rejected before hashing."""
        self.user_repo.find_by_email.return_value = make_user()

        with pytest.raises(AlreadyExistsError, match="Email already registered"):
            await self.service.register(TEST_NAME, TEST_EMAIL, TEST_PASSWORD)

        self.password_policy.hash.assert_not_called()
        self.token_authority.issue_pair.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_duplicate_phone(self):
        """An existing phone number is rejected."""
        self.user_repo.find_by_phone.return_value = make_user(phone="+15551234567")

        with pytest.raises(AlreadyExistsError, match="Phone number already registered"):
            await self.service.register(
                TEST_NAME, "other@example.com", TEST_PASSWORD, phone="+15551234567"
            )

        self.user_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_lost_race_surfaces_already_exists(self):
        """A uniqueness failure from the store is passed through."""
        self.user_repo.create.side_effect = AlreadyExistsError("Email already registered")

        with pytest.raises(AlreadyExistsError):
            await self.service.register(TEST_NAME, TEST_EMAIL, TEST_PASSWORD)

        self.token_authority.issue_pair.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_unexpected_failure_wrapped(self):
        """Unexpected errors become RegistrationFailedError with the cause kept."""
        cause = RuntimeError("database down")
        self.user_repo.create.side_effect = cause

        with pytest.raises(RegistrationFailedError) as exc_info:
            await self.service.register(TEST_NAME, TEST_EMAIL, TEST_PASSWORD)

        assert exc_info.value.__cause__ is cause
        assert "database down" not in exc_info.value.message


class TestLogin(IdentityServiceTestBase):
    """Tests for login."""

    @pytest.mark.asyncio
    async def test_login_success(self):
        """Valid credentials return tokens and the redacted user."""
        user = make_user()
        self.user_repo.find_by_email.return_value = user

        result = await self.service.login("TEST@example.com", TEST_PASSWORD)

        self.password_policy.verify.assert_called_once_with(TEST_PASSWORD, TEST_HASH)
        assert result.user.id == user.id
        assert result.tokens == make_pair()

    @pytest.mark.asyncio
    async def test_login_normalizes_email(self):
        """Lookups use the lower-cased email."""
        self.user_repo.find_by_email.return_value = make_user()

        await self.service.login("  TEST@EXAMPLE.COM ", TEST_PASSWORD)

        looked_up = self.user_repo.find_by_email.call_args[0][0]
        assert looked_up == Email(TEST_EMAIL)

    @pytest.mark.asyncio
    async def test_login_wrong_password(self):
        """A wrong password yields the generic credentials error."""
        self.user_repo.find_by_email.return_value = make_user()
        self.password_policy.verify.return_value = False

        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            await self.service.login(TEST_EMAIL, "Wrong-Pass!1")

        self.token_authority.issue_pair.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_unknown_email_runs_dummy_verify(self):
        """Unknown accounts cost one bcrypt check and look like a wrong password."""
        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            await self.service.login("nobody@example.com", TEST_PASSWORD)

        self.password_policy.verify.assert_called_once_with(TEST_PASSWORD, DUMMY_HASH)

    @pytest.mark.asyncio
    async def test_login_malformed_email_is_unknown_account(self):
        """A syntactically invalid email is treated like an unknown one."""
        with pytest.raises(InvalidCredentialsError):
            await self.service.login("not-an-email", TEST_PASSWORD)

        self.user_repo.find_by_email.assert_not_called()
        self.password_policy.verify.assert_called_once()

    @pytest.mark.asyncio
    async def test_login_missing_fields(self):
        """Both fields are required and reported together."""
        with pytest.raises(ValidationFailedError) as exc_info:
            await self.service.login("", "")

        assert exc_info.value.errors == ["Email is required", "Password is required"]

    @pytest.mark.asyncio
    async def test_login_rehashes_outdated_hash(self):
        """A hash with an outdated cost is replaced after a successful login."""
        user = make_user()
        self.user_repo.find_by_email.return_value = user
        self.password_policy.needs_rehash.return_value = True
        self.password_policy.hash.return_value = "$2b$12$newhash"

        await self.service.login(TEST_EMAIL, TEST_PASSWORD)

        self.user_repo.update_password_hash.assert_called_once_with(user.id, "$2b$12$newhash")

    @pytest.mark.asyncio
    async def test_login_rehash_skipped_for_now_weak_password(self):
        """Passwords that fail today's rules are not rehashed, login still succeeds."""
        self.user_repo.find_by_email.return_value = make_user()
        self.password_policy.needs_rehash.return_value = True
        self.password_policy.hash.side_effect = WeakPasswordError(["too short"])

        result = await self.service.login(TEST_EMAIL, TEST_PASSWORD)

        assert result.tokens == make_pair()
        self.user_repo.update_password_hash.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_unexpected_failure_wrapped(self):
        """Store failures become LoginFailedError."""
        self.user_repo.find_by_email.side_effect = ConnectionError("timeout")

        with pytest.raises(LoginFailedError) as exc_info:
            await self.service.login(TEST_EMAIL, TEST_PASSWORD)

        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestSocialAuth(IdentityServiceTestBase):
    """Tests for social_auth."""

    @pytest.mark.asyncio
    async def test_social_auth_creates_new_user(self):
        """First sign-on creates an account with a generated password."""
        self.profile_fetcher.fetch_profile.return_value = SocialProfile(
            name="Social User", email="Social@Example.com"
        )
        self.password_policy.generate.return_value = "G3nerated!Secret"

        result = await self.service.social_auth("google", "provider-token")

        self.profile_fetcher.fetch_profile.assert_called_once_with("google", "provider-token")
        self.password_policy.hash.assert_called_once_with("G3nerated!Secret")
        created = self.user_repo.create.call_args[0][0]
        assert created.email == "social@example.com"
        assert created.name == "Social User"
        assert result.is_new_user is True
        assert result.user.email == "social@example.com"

    @pytest.mark.asyncio
    async def test_social_auth_existing_user(self):
        """Known emails sign in without creating an account."""
        user = make_user()
        self.user_repo.find_by_email.return_value = user
        self.profile_fetcher.fetch_profile.return_value = SocialProfile(
            name=TEST_NAME, email=TEST_EMAIL
        )

        result = await self.service.social_auth("apple", "provider-token")

        self.user_repo.create.assert_not_called()
        assert result.is_new_user is False
        assert result.user.id == user.id

    @pytest.mark.asyncio
    async def test_social_auth_name_falls_back_to_email(self):
        """A profile without a name uses the email's local part."""
        self.profile_fetcher.fetch_profile.return_value = SocialProfile(
            name="", email="jane.doe@example.com"
        )
        self.password_policy.generate.return_value = "G3nerated!Secret"

        await self.service.social_auth("facebook", "provider-token")

        created = self.user_repo.create.call_args[0][0]
        assert created.name == "jane.doe"

    @pytest.mark.asyncio
    async def test_social_auth_unsupported_provider(self):
        """Providers the fetcher does not support are rejected."""
        self.profile_fetcher.supports.return_value = False

        with pytest.raises(SocialAuthFailedError, match="Unsupported provider") as exc_info:
            await self.service.social_auth("myspace", "provider-token")

        assert exc_info.value.details == {"provider": "myspace"}
        self.profile_fetcher.fetch_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_social_auth_without_fetcher(self):
        """Without a fetcher every provider is unsupported."""
        service = IdentityService(
            user_repository=self.user_repo,
            password_policy=self.password_policy,
            token_authority=self.token_authority,
        )

        with pytest.raises(SocialAuthFailedError):
            await service.social_auth("google", "provider-token")

    @pytest.mark.asyncio
    async def test_social_auth_fetch_failure(self):
        """Provider errors become SocialAuthFailedError."""
        self.profile_fetcher.fetch_profile.side_effect = ConnectionError("provider down")

        with pytest.raises(SocialAuthFailedError) as exc_info:
            await self.service.social_auth("google", "provider-token")

        assert exc_info.value.message == "Social authentication failed for google"
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestTokensAndLogout(IdentityServiceTestBase):
    """Tests for refresh_token, logout and logout_all."""

    @pytest.mark.asyncio
    async def test_refresh_token_delegates(self):
        """Refresh goes straight to the token authority."""
        result = await self.service.refresh_token("refresh-token")

        self.token_authority.refresh.assert_called_once_with("refresh-token")
        assert result is self.token_authority.refresh.return_value

    @pytest.mark.asyncio
    async def test_refresh_token_error_propagates(self):
        """Token errors are not wrapped."""
        self.token_authority.refresh.side_effect = InvalidTokenError("Invalid token type")

        with pytest.raises(InvalidTokenError):
            await self.service.refresh_token("access-token")

    @pytest.mark.asyncio
    async def test_logout(self):
        """Logout revokes one session."""
        await self.service.logout("user-1", "session-1")

        self.token_authority.revoke.assert_called_once_with("user-1", "session-1")

    @pytest.mark.asyncio
    async def test_logout_all(self):
        """Logout everywhere revokes every session."""
        await self.service.logout_all("user-1")

        self.token_authority.revoke_all.assert_called_once_with("user-1")


class TestChangePassword(IdentityServiceTestBase):
    """Tests for change_password."""

    @pytest.mark.asyncio
    async def test_change_password_success(self):
        """The new hash is stored and all sessions revoked."""
        user = make_user()
        self.user_repo.find_by_id.return_value = user
        self.password_policy.hash.return_value = "$2b$04$newhash"

        await self.service.change_password(user.id, TEST_PASSWORD, "N3w!Secure#Pass")

        self.password_policy.verify.assert_called_once_with(TEST_PASSWORD, TEST_HASH)
        self.user_repo.update_password_hash.assert_called_once_with(user.id, "$2b$04$newhash")
        self.token_authority.revoke_all.assert_called_once_with(user.id)

    @pytest.mark.asyncio
    async def test_change_password_unknown_user(self):
        """Unknown users raise UserNotFoundError."""
        self.user_repo.find_by_id.return_value = None

        with pytest.raises(UserNotFoundError):
            await self.service.change_password("missing", TEST_PASSWORD, "N3w!Secure#Pass")

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self):
        """A wrong current password is refused."""
        self.user_repo.find_by_id.return_value = make_user()
        self.password_policy.verify.return_value = False

        with pytest.raises(PasswordChangeFailedError, match="Current password is incorrect"):
            await self.service.change_password("user-1", "nope", "N3w!Secure#Pass")

        self.user_repo.update_password_hash.assert_not_called()
        self.token_authority.revoke_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_password_weak_new_password(self):
        """A weak new password leaves the stored hash untouched."""
        self.user_repo.find_by_id.return_value = make_user()
        self.password_policy.hash.side_effect = WeakPasswordError(["too short"])

        with pytest.raises(WeakPasswordError):
            await self.service.change_password("user-1", TEST_PASSWORD, "short")

        self.user_repo.update_password_hash.assert_not_called()
        self.token_authority.revoke_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_password_store_failure_wrapped(self):
        """Store failures become PasswordChangeFailedError."""
        self.user_repo.find_by_id.return_value = make_user()
        self.user_repo.update_password_hash.side_effect = RuntimeError("disk full")

        with pytest.raises(PasswordChangeFailedError, match="Failed to change password"):
            await self.service.change_password("user-1", TEST_PASSWORD, "N3w!Secure#Pass")


class TestGetCurrentUser(IdentityServiceTestBase):
    """Tests for get_current_user."""

    @pytest.mark.asyncio
    async def test_get_current_user(self):
        """Known users are returned as views."""
        user = make_user(phone="+15551234567")
        self.user_repo.find_by_id.return_value = user

        view = await self.service.get_current_user(user.id)

        assert view == UserView.from_user(user)
        assert view.phone == "+15551234567"

    @pytest.mark.asyncio
    async def test_get_current_user_missing(self):
        """Unknown ids raise UserNotFoundError."""
        self.user_repo.find_by_id.return_value = None

        with pytest.raises(UserNotFoundError):
            await self.service.get_current_user("missing")
