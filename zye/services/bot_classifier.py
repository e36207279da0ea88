"""
Crawler Detection

Decides whether a request should get the social preview page instead of a
redirect. The check is advisory: a false positive shows a human the preview
page (which still forwards them in the browser), a false negative hands a
crawler a plain redirect.
"""

import re
from typing import Any

# Generic automated fetchers
GENERIC_CRAWLER_TOKENS = ("bot", "crawl", "spider", "slurp", "mediapartners")

# Link-preview fetchers of social platforms and chat apps.
# The same list is embedded in the preview page for the in-browser check.
SOCIAL_CRAWLERS = (
    "facebookexternalhit",
    "facebookcatalog",
    "twitterbot",
    "linkedinbot",
    "whatsapp",
    "telegram",
    "skype",
    "discord",
    "slackbot",
    "googlebot",
    "bingbot",
    "yandexbot",
    "baiduspider",
    "pinterest",
    "embedly",
    "vkshare",
)

CRAWLER_PATTERN = re.compile(
    "|".join(re.escape(token) for token in GENERIC_CRAWLER_TOKENS + SOCIAL_CRAWLERS),
    re.IGNORECASE,
)

PREVIEW_QUERY_PARAM = "preview"


def is_crawler_user_agent(user_agent: str) -> bool:
    """True if the User-Agent names an automated fetcher."""
    if not user_agent:
        return False
    return CRAWLER_PATTERN.search(user_agent) is not None


def is_preview_requested(query_params: Any) -> bool:
    """True if the request explicitly asks for the preview page (?preview=1)."""
    return query_params.get(PREVIEW_QUERY_PARAM) == "1"


def classify(request: Any) -> bool:
    """
    Classify a request as crawler / preview request.

    Args:
        request: Anything exposing `headers` and `query_params` mappings
            (a Starlette Request in production)

    Returns:
        True when the preview page should be served
    """
    user_agent = request.headers.get("user-agent") or ""
    return is_crawler_user_agent(user_agent) or is_preview_requested(request.query_params)
