"""
Request network helpers.
"""

from fastapi import Request


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Checks the CDN header first, then X-Forwarded-For, then the peer address.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string, "unknown" when nothing is available
    """
    connecting_ip = request.headers.get("CF-Connecting-IP")
    if connecting_ip:
        return connecting_ip.strip()

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    return request.client.host if request.client else "unknown"
