"""Password complexity policy shared by every flow that sets a password"""

import re

from libs.result import Error, Result, Return

ALLOWED_SYMBOLS = "@$!%*?&"
MIN_LENGTH = 8
MAX_BYTES = 72  # bcrypt truncates beyond this

POLICY_MESSAGE = (
    "Password must be at least 8 characters and contain an uppercase letter, "
    f"a lowercase letter, a digit and a symbol from {ALLOWED_SYMBOLS}"
)


def validate_password(password: str) -> Result[None]:
    """
    Errors:
        - PASSWORD_POLICY_VIOLATION: password does not satisfy the policy
    """
    if (
        not password
        or len(password) < MIN_LENGTH
        or len(password.encode("utf-8")) > MAX_BYTES
        or not re.search(r"[A-Z]", password)
        or not re.search(r"[a-z]", password)
        or not re.search(r"\d", password)
        or not any(ch in ALLOWED_SYMBOLS for ch in password)
    ):
        return Return.err(Error("PASSWORD_POLICY_VIOLATION", POLICY_MESSAGE))
    return Return.ok(None)
