"""
ProductHub Backend — Input Validators
=======================================

What:  Shape checks for credentials and required text fields.
How:   Plain synchronous predicates. No database access, no settings lookup;
       callers pass the configured allow-list and minimum length in.
Who:   UserService (registration, login) and ProductService (create/update).
"""

import re
from typing import Any, Iterable, Optional

# local-part@domain.tld with a tld of at least two letters; use with fullmatch
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

DEFAULT_PASSWORD_MIN_LENGTH = 8


def validate_email(email: Any, allowed_domains: Optional[Iterable[str]] = None) -> bool:
    """
    Return True when `email` has the local-part@domain.tld shape.

    Args:
        email: Candidate value; anything that is not a string is rejected.
        allowed_domains: Optional allow-list of domains (e.g. ["gmail.com"]).
            None or empty accepts any syntactically valid domain. Matching
            is case-insensitive and exact on the part after "@".
    """
    if not isinstance(email, str) or not EMAIL_PATTERN.fullmatch(email):
        return False

    allowed = {d.strip().lower() for d in allowed_domains or () if d and d.strip()}
    if not allowed:
        return True

    domain = email.rsplit("@", 1)[1].lower()
    return domain in allowed


def validate_password(password: Any, min_length: int = DEFAULT_PASSWORD_MIN_LENGTH) -> bool:
    """Return True when `password` is a string of at least `min_length` characters."""
    return isinstance(password, str) and len(password) >= min_length


def is_blank(value: Any) -> bool:
    """None, or a string with nothing but whitespace."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()
