"""Keyword and pattern gate deciding whether a message is about RunCloud.

Messages that fail the gate get a fixed deflection answer without any call to
Ollama or the MCP server.
"""

import re

RUNCLOUD_KEYWORDS: tuple[str, ...] = (
    "server",
    "servers",
    "application",
    "applications",
    "app",
    "webapp",
    "website",
    "site",
    "database",
    "backup",
    "backups",
    "runcloud",
)

_RESOURCE = r"(servers?|apps?|applications?|sites?|databases?|backups?)"

RUNCLOUD_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        rf"\bhow\s+many\b.*\b{_RESOURCE}\b",
        rf"\blist\b.*\b{_RESOURCE}\b",
        rf"\b(show|get|check)\s+(me\s+)?(my|all|the)\b.*\b{_RESOURCE}\b",
        r"\b(php|nginx|mysql|mariadb)\s+version\b",
        r"\bssl\b|\bcertificates?\b",
    )
)

OUT_OF_SCOPE_ANSWER = (
    "I'm a RunCloud management assistant. I can help with servers, web "
    "applications, databases, and backups. Please ask RunCloud-related questions."
)


def is_in_scope(message: str) -> bool:
    """Return True if the message looks like a RunCloud question.

    A message is in scope when it contains any keyword (case-insensitive
    substring match) or matches any of the phrasing patterns.
    """
    lowered = message.lower()
    if any(keyword in lowered for keyword in RUNCLOUD_KEYWORDS):
        return True
    return any(pattern.search(message) for pattern in RUNCLOUD_PATTERNS)
