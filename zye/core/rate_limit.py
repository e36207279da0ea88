"""
Rate Limiting Configuration

This module provides rate limiting functionality for endpoints.

Design Decisions:
- Uses slowapi for rate limiting (lightweight, FastAPI-compatible)
- Different limits for different endpoints
- Client-based limiting, keyed like the rest of the app (CDN header first)
- Password verification is limited tighter than lookups to slow guessing
"""

from slowapi import Limiter

from zye.core.network import get_client_ip
from zye.core.setting import settings

# Initialize rate limiter
# Keyed on the client address behind the CDN, not the proxy peer
limiter = Limiter(key_func=get_client_ip, enabled=settings.RATE_LIMIT_ENABLED)

# Rate limit configurations per endpoint
# Format: "count/period" (e.g., "10/minute" means 10 requests per minute)
RATE_LIMITS = {
    "redirect": "100/minute",  # Resolutions: 100 per minute per IP
    "verify": "10/minute",  # Password attempts: 10 per minute per IP
    "delete": "30/minute",  # Deletions: 30 per minute per IP
}
