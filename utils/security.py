import re
from typing import Iterable, Optional


def redact_secrets(text: str, known_values: Optional[Iterable[str]] = None) -> str:
    """Redact credential patterns (and any known credential values) from log text."""
    if not isinstance(text, str):
        return text

    redacted = text

    # Literal credential values, e.g. the configured API key echoed back in an error body
    for value in known_values or ():
        if value and len(value) >= 4:
            redacted = redacted.replace(value, "***REDACTED***")

    # Query params like apiKey=, api_key=, key=, token=, secret=
    redacted = re.sub(r"(?i)(api[_-]?key|key|token|secret)=([^&\s]+)", r"\1=***REDACTED***", redacted)

    # Header echoes: x-api-key: <value>, x-api-secret: <value>, x-xsrf-token: <value>
    redacted = re.sub(
        r"(?i)[\"']?(x-api-key|x-api-secret|x-xsrf-token)[\"']?\s*[:=]\s*[\"']?[^\s,\"'}]+[\"']?",
        r"\1: ***REDACTED***",
        redacted,
    )

    # Generic bearer tokens
    redacted = re.sub(r"(?i)Bearer\s+[A-Za-z0-9._\-]+", "Bearer ***REDACTED***", redacted)

    return redacted


def is_configured_key(value: Optional[str]) -> bool:
    """Return True if an env var-like key is configured (not empty or placeholder)."""
    if not value:
        return False
    s = value.strip()
    if not s:
        return False
    return ('YOUR_' not in s) and ('your_' not in s)
