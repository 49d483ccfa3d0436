"""Identity service: registration, login, social sign-on and sessions."""

from __future__ import annotations

import logging

from warden_identity.application.ports import ProfileFetcher
from warden_identity.domain.user import (
    DEFAULT_ROLE,
    Email,
    InvalidEmailError,
    InvalidPhoneError,
    PhoneNumber,
    User,
    UserRepository,
    UserRole,
)
from warden_identity.exceptions import (
    AlreadyExistsError,
    AuthError,
    InvalidCredentialsError,
    LoginFailedError,
    PasswordChangeFailedError,
    RegistrationFailedError,
    SocialAuthFailedError,
    UserNotFoundError,
    ValidationFailedError,
    WeakPasswordError,
)
from warden_identity.schemas import AuthResult, SocialAuthResult, TokenPair, UserView
from warden_identity.services import PasswordPolicy, TokenAuthority

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
_NAME_STRIP_CHARS = str.maketrans("", "", "<>'")


class IdentityService:
    """
    Application service for account authentication.

    Composes the password policy and the token authority against a user
    repository to provide:
    - Registration and login
    - Social sign-on through a profile fetcher
    - Token refresh and logout
    - Password change

    Every user returned to a caller is a ``UserView``; the password hash
    never leaves this service.
    """

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        password_policy: PasswordPolicy,
        token_authority: TokenAuthority,
        profile_fetcher: ProfileFetcher | None = None,
        default_role: UserRole = DEFAULT_ROLE,
    ):
        self._user_repo = user_repository
        self._password_policy = password_policy
        self._token_authority = token_authority
        self._profile_fetcher = profile_fetcher
        self._default_role = default_role

    def _issue(self, user: User) -> TokenPair:
        return self._token_authority.issue_pair(user.id, user.email, user.role)

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        phone: str | None = None,
    ) -> AuthResult:
        try:
            email_obj, phone_obj = self._validate_registration(name, email, password, phone)

            if await self._user_repo.find_by_email(email_obj) is not None:
                raise AlreadyExistsError("Email already registered")

            if phone_obj is not None and await self._user_repo.find_by_phone(phone_obj.value):
                raise AlreadyExistsError("Phone number already registered")

            user = User.create(
                name=_sanitize_name(name),
                email=email_obj,
                password_hash=self._password_policy.hash(password),
                role=self._default_role,
                phone=phone_obj,
            )
            await self._user_repo.create(user)
            tokens = self._issue(user)
        except AuthError:
            raise
        except Exception as e:
            logger.exception("Registration failed")
            raise RegistrationFailedError from e

        logger.info("User registered: %s (role: %s)", user.id, user.role.value)
        return AuthResult(user=UserView.from_user(user), tokens=tokens)

    async def login(self, email: str, password: str) -> AuthResult:
        errors = []
        if not email or not email.strip():
            errors.append("Email is required")
        if not password:
            errors.append("Password is required")
        if errors:
            raise ValidationFailedError(errors)

        try:
            user = await self._find_by_email_or_none(email)

            if user is None:
                # Same bcrypt cost as a real check, so timing does not leak
                self._password_policy.verify(password, self._password_policy.dummy_hash)
                logger.info("Login failed: unknown account")
                raise InvalidCredentialsError

            if not self._password_policy.verify(password, user.password_hash):
                logger.info("Login failed: wrong password for user %s", user.id)
                raise InvalidCredentialsError

            if self._password_policy.needs_rehash(user.password_hash):
                await self._rehash(user, password)

            tokens = self._issue(user)
        except AuthError:
            raise
        except Exception as e:
            logger.exception("Login failed")
            raise LoginFailedError from e

        logger.info("User logged in: %s", user.id)
        return AuthResult(user=UserView.from_user(user), tokens=tokens)

    async def social_auth(self, provider: str, token: str) -> SocialAuthResult:
        if self._profile_fetcher is None or not self._profile_fetcher.supports(provider):
            raise SocialAuthFailedError(provider, f"Unsupported provider: {provider}")

        try:
            profile = await self._profile_fetcher.fetch_profile(provider, token)
            email_obj = Email(profile.email)

            user = await self._user_repo.find_by_email(email_obj)
            is_new_user = user is None
            if user is None:
                # No local secret exists for this account; store an unusable random one
                user = User.create(
                    name=_sanitize_name(profile.name) or email_obj.value.split("@")[0],
                    email=email_obj,
                    password_hash=self._password_policy.hash(self._password_policy.generate()),
                    role=self._default_role,
                    phone=profile.phone,
                )
                await self._user_repo.create(user)

            tokens = self._issue(user)
        except AuthError:
            raise
        except Exception as e:
            logger.exception("Social authentication via %s failed", provider)
            raise SocialAuthFailedError(provider) from e

        logger.info(
            "Social login via %s: %s (new: %s)",
            provider,
            user.id,
            is_new_user,
        )
        return SocialAuthResult(
            user=UserView.from_user(user),
            tokens=tokens,
            is_new_user=is_new_user,
        )

    async def refresh_token(self, refresh_token: str) -> TokenPair:
        return self._token_authority.refresh(refresh_token)

    async def logout(self, principal_id: str, session_id: str | None = None) -> None:
        self._token_authority.revoke(principal_id, session_id)

    async def logout_all(self, principal_id: str) -> None:
        self._token_authority.revoke_all(principal_id)

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> None:
        try:
            user = await self._user_repo.find_by_id(user_id)
            if user is None:
                raise UserNotFoundError

            if not self._password_policy.verify(current_password, user.password_hash):
                msg = "Current password is incorrect"
                raise PasswordChangeFailedError(msg)

            new_hash = self._password_policy.hash(new_password)
            await self._user_repo.update_password_hash(user.id, new_hash)
        except AuthError:
            raise
        except Exception as e:
            logger.exception("Password change failed for user %s", user_id)
            raise PasswordChangeFailedError("Failed to change password") from e

        self._token_authority.revoke_all(user.id)
        logger.info("Password changed for user: %s", user.id)

    async def get_current_user(self, user_id: str) -> UserView:
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        return UserView.from_user(user)

    async def _find_by_email_or_none(self, email: str) -> User | None:
        try:
            email_obj = Email(email)
        except InvalidEmailError:
            return None
        return await self._user_repo.find_by_email(email_obj)

    async def _rehash(self, user: User, password: str) -> None:
        try:
            new_hash = self._password_policy.hash(password)
        except WeakPasswordError:
            # Predates the current rules; replaced on the next password change
            return
        await self._user_repo.update_password_hash(user.id, new_hash)
        logger.debug("Rehashed password for user: %s", user.id)

    def _validate_registration(
        self,
        name: str,
        email: str,
        password: str,
        phone: str | None,
    ) -> tuple[Email, PhoneNumber | None]:
        errors: list[str] = []
        email_obj = None
        phone_obj = None

        if not name or not name.strip():
            errors.append("Name is required")

        try:
            email_obj = Email(email)
        except InvalidEmailError as e:
            errors.append(str(e))

        if not password:
            errors.append("Password is required")
        else:
            errors.extend(self._password_policy.assess_strength(password).violations)

        if phone:
            try:
                phone_obj = PhoneNumber(phone)
            except InvalidPhoneError as e:
                errors.append(str(e))

        if errors or email_obj is None:
            raise ValidationFailedError(errors)

        return email_obj, phone_obj


def _sanitize_name(name: str) -> str:
    return (name or "").translate(_NAME_STRIP_CHARS).strip()[:MAX_NAME_LENGTH]
