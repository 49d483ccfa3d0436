"""Password policy: hashing with bcrypt, strength rules and generation.

Strength assessment is independent of hashing, so callers can reject a weak
password (and show every reason at once) before paying the bcrypt cost.
"""

from __future__ import annotations

import re
import secrets
import string
from dataclasses import dataclass, field
from functools import cached_property

import bcrypt

from warden_identity.exceptions import WeakPasswordError

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "password123",
        "123456",
        "123456789",
        "qwerty",
        "abc123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
        "1234567890",
        "password1",
        "qwerty123",
        "admin123",
        "welcome123",
    }
)

KNOWN_SEQUENCES = (
    "abcdefghijklmnopqrstuvwxyz",
    "01234567890",
    "qwertyuiop",
    "asdfghjkl",
    "zxcvbnm",
)

_REPEATED_CHAR = re.compile(r"(.)\1{2,}")

# Generated passwords are resampled until they pass; this only bounds a
# misconfigured policy that can never be satisfied.
_MAX_GENERATE_ATTEMPTS = 1000
DEFAULT_GENERATED_LENGTH = 16


@dataclass(frozen=True)
class PasswordRules:
    """Configurable strength requirements."""

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = True

    def required_charsets(self) -> list[str]:
        charsets = []
        if self.require_uppercase:
            charsets.append(UPPERCASE)
        if self.require_lowercase:
            charsets.append(LOWERCASE)
        if self.require_digit:
            charsets.append(DIGITS)
        if self.require_special:
            charsets.append(SYMBOLS)
        return charsets


@dataclass(frozen=True)
class StrengthAssessment:
    ok: bool
    violations: list[str] = field(default_factory=list)


class PasswordPolicy:
    """Service for password hashing, verification and strength policy.

    Uses bcrypt with a configurable work factor.

    Examples
    --------
    >>> policy = PasswordPolicy()
    >>> hashed = policy.hash("Corr3ct-Horse!Battery")
    >>> policy.verify("Corr3ct-Horse!Battery", hashed)
    True
    >>> policy.assess_strength("password123").ok
    False
    """

    def __init__(self, rules: PasswordRules | None = None, rounds: int = 12):
        """Initialize the password policy.

        Parameters
        ----------
        rules
            Strength requirements. Defaults to every character class on and
            a minimum length of 8.
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12.
        """
        self._rules = rules or PasswordRules()
        self._rounds = rounds
        self._random = secrets.SystemRandom()

    @property
    def rules(self) -> PasswordRules:
        return self._rules

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements; carries every violation
        """
        assessment = self.assess_strength(password)
        if not assessment.ok:
            raise WeakPasswordError(assessment.violations)
        return self._hashpw(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Never raises; a malformed hash or oversized input counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError, AttributeError):
            return False

    @cached_property
    def dummy_hash(self) -> str:
        """A hash to verify against when no account exists.

        Running bcrypt anyway keeps login timing identical for unknown
        emails and wrong passwords.
        """
        return self._hashpw(secrets.token_urlsafe(24))

    def assess_strength(self, password: str) -> StrengthAssessment:
        """Evaluate every strength rule and collect all violations."""
        rules = self._rules
        violations: list[str] = []
        password = password or ""

        if len(password) < rules.min_length:
            violations.append(f"Password must be at least {rules.min_length} characters")

        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            violations.append(f"Password cannot exceed {BCRYPT_MAX_BYTES} bytes")

        if rules.require_uppercase and not re.search(r"[A-Z]", password):
            violations.append("Password must contain at least one uppercase letter")

        if rules.require_lowercase and not re.search(r"[a-z]", password):
            violations.append("Password must contain at least one lowercase letter")

        if rules.require_digit and not re.search(r"[0-9]", password):
            violations.append("Password must contain at least one number")

        if rules.require_special and not re.search(r"[^a-zA-Z0-9]", password):
            violations.append("Password must contain at least one special character")

        if password.lower() in COMMON_PASSWORDS:
            violations.append("Password is too common or weak")

        if _REPEATED_CHAR.search(password):
            violations.append("Password contains too many repeating characters")

        if _has_repeating_pattern(password):
            violations.append("Password contains a repeating pattern")

        if _has_sequence(password):
            violations.append("Password contains sequential characters")

        return StrengthAssessment(ok=not violations, violations=violations)

    def generate(self, length: int | None = None) -> str:
        """Generate a random password that satisfies the current rules.

        The default length is 16, or the minimum length when that is larger.

        One character per required class is seeded first, the rest is
        filled from the full alphabet, then the result is shuffled.
        """
        if length is None:
            length = max(DEFAULT_GENERATED_LENGTH, self._rules.min_length)
        required = self._rules.required_charsets()
        if length < max(self._rules.min_length, len(required)):
            msg = f"Cannot generate a compliant password of length {length}"
            raise ValueError(msg)
        if length > BCRYPT_MAX_BYTES:
            msg = f"Generated passwords cannot exceed {BCRYPT_MAX_BYTES} characters"
            raise ValueError(msg)

        alphabet = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS
        for _ in range(_MAX_GENERATE_ATTEMPTS):
            chars = [secrets.choice(charset) for charset in required]
            chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
            self._random.shuffle(chars)
            candidate = "".join(chars)
            if self.assess_strength(candidate).ok:
                return candidate

        msg = "Could not generate a password satisfying the password rules"
        raise RuntimeError(msg)

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash was made with a different work factor.

        After changing the rounds setting, existing hashes can be identified
        for rehashing on next login.
        """
        try:
            # bcrypt format: $2b$XX$...
            parts = password_hash.split("$")
            if len(parts) >= 3:
                return int(parts[2]) != self._rounds
        except (ValueError, IndexError):
            pass
        return True

    def _hashpw(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _has_repeating_pattern(password: str) -> bool:
    """True if a leading sub-pattern repeats over at least half the string ("abcabc")."""
    length = len(password)
    for size in range(2, length // 2 + 1):
        repeated = password[:size] * (length // size)
        if password.startswith(repeated) and len(repeated) >= length * 0.5:
            return True
    return False


def _has_sequence(password: str) -> bool:
    """True for any 4-run of a known sequence, or a 3-run covering 40% of the string."""
    lowered = password.lower()
    for sequence in KNOWN_SEQUENCES:
        for i in range(len(sequence) - 3):
            if sequence[i : i + 4] in lowered:
                return True
    for sequence in KNOWN_SEQUENCES:
        for i in range(len(sequence) - 2):
            if sequence[i : i + 3] in lowered and 3 >= len(lowered) * 0.4:
                return True
    return False
