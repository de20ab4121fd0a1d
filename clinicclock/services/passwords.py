# ClinicClock - Password Hashing and Policy
# One-way hashing for employee and admin credentials

from passlib.context import CryptContext

from clinicclock.config import get_settings


settings = get_settings()

# The shared password every new employee starts with.
# It must be replaced on the first clock-in.
DEFAULT_PASSWORD = "123456"

# Personal password length range (inclusive)
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 12

# Password hashing configuration
# Using bcrypt with automatic salt generation
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(plain_password: str) -> str:
    """
    Hash a plain text password.
    
    A fresh salt is generated on every call, so hashing the same
    password twice gives two different strings.
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a hash.
    
    Returns True if password matches, False otherwise. A missing or
    malformed hash counts as a mismatch.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Invalid hash format
        return False


def hash_default_password() -> str:
    """Hash of DEFAULT_PASSWORD, for new employees and admin resets."""
    return hash_password(DEFAULT_PASSWORD)


def is_valid_length(password: str) -> bool:
    return MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH


def is_default_password(password: str) -> bool:
    """
    True if password is the literal default password.
    
    Only for hints and new-password validation, never for
    authentication.
    """
    return password == DEFAULT_PASSWORD


def validate_new_password(password: str) -> list[str]:
    """
    Check a proposed personal password against the policy.
    
    Returns a list of problems; an empty list means it is acceptable.
    """
    problems = []
    if not is_valid_length(password):
        problems.append(
            f"Password must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH} characters"
        )
    if is_default_password(password):
        problems.append("Password must be different from the default password")
    return problems
