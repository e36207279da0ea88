"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.

Security Considerations:
- Short codes come straight from the request path and are used as store keys
- Length limits keep garbage paths away from the store
"""

import re
from typing import Optional

# Generated codes are 6 alphanumerics; custom codes allow '-' and '_' (3-20 chars)
SHORT_CODE_PATTERN = re.compile(r'^[0-9a-zA-Z_-]+$')
MAX_SHORT_CODE_LENGTH = 20


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise

    Security:
    - Only allows [0-9a-zA-Z_-]
    - Prevents path traversal and markup in store keys
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not SHORT_CODE_PATTERN.match(short_code):
        return None

    return short_code
