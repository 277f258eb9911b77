"""Input validation helpers shared by the HTTP services.

Both services validate the postal code at their own boundary: the gateway
protects against malformed client input, the weather service against
malformed internal forwarding. They call the same pure function so the
two checks cannot drift apart.
"""

from __future__ import annotations

import re

CEP_LENGTH = 8

# ASCII digits only: str.isdigit() and \d both accept other Unicode digits
_CEP_PATTERN = re.compile(r"[0-9]{8}")


def is_valid_cep(value: object) -> bool:
    """Check whether a value is a syntactically valid CEP.

    A valid CEP is a string of exactly 8 ASCII digits, with no hyphen,
    whitespace or any other character.

    Args:
        value: Candidate postal code

    Returns:
        True if the value is exactly 8 ASCII digits, False otherwise

    Example:
        >>> is_valid_cep("01310100")
        True
        >>> is_valid_cep("01310-100")
        False
        >>> is_valid_cep("123")
        False
    """
    if not isinstance(value, str):
        return False
    return _CEP_PATTERN.fullmatch(value) is not None
