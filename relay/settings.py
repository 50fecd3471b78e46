"""
Centralised settings for the relay service (env-first, code-light).

Every value comes from the process environment; ``load_settings`` can be
pointed at a ``.env`` file so local runs stay ergonomic.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from utils.security import is_configured_key

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URLS = [
    "https://communities.win/api/v2/post/newv2.json?community=ip2always",
    "https://communities.win/api/v2/post/newv2.json?community=spictank",
]
DEFAULT_UPLOAD_URL = "https://up1.fileditch.com/upload.php"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
)
REQUIRED_CREDENTIALS = ("CW_API_KEY", "CW_API_SECRET", "CW_XSRF_TOKEN")


class ConfigError(RuntimeError):
    """Raised when the environment cannot produce a usable configuration."""


@dataclass
class RelaySettings:
    api_key: str
    api_secret: str
    xsrf_token: str
    source_urls: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_URLS))
    upload_url: str = DEFAULT_UPLOAD_URL
    data_file_path: Path = Path("data.json")
    host: str = "0.0.0.0"
    port: int = 5000
    interval_seconds: int = 120
    request_timeout: int = 30
    upload_timeout: int = 300
    user_agent: str = DEFAULT_USER_AGENT

    def feed_headers(self) -> Dict[str, str]:
        """Fixed header set sent with every feed request."""
        return {
            "accept": "application/json, text/plain, */*",
            "user-agent": self.user_agent,
            "x-api-key": self.api_key,
            "x-api-secret": self.api_secret,
            "x-xsrf-token": self.xsrf_token,
            "x-api-platform": "Scored-Desktop",
            "sec-fetch-site": "same-origin",
        }

    def secret_values(self) -> List[str]:
        return [self.api_key, self.api_secret, self.xsrf_token]

    def public_view(self) -> Dict[str, object]:
        """Settings without credentials, for status payloads."""
        return {
            "source_urls": list(self.source_urls),
            "upload_url": self.upload_url,
            "data_file_path": str(self.data_file_path),
            "interval_seconds": self.interval_seconds,
            "request_timeout": self.request_timeout,
            "upload_timeout": self.upload_timeout,
        }


def _int_from_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Non-positive int value for %s=%s; using default %s", key, raw, default)
        return default
    return value


def _parse_source_urls(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_SOURCE_URLS)
    urls = [token.strip() for token in raw.split(",") if token.strip()]
    if not urls:
        logger.warning("CW_API_URLS is set but lists no URLs; using defaults.")
        return list(DEFAULT_SOURCE_URLS)
    return urls


def load_settings(dotenv_path: Optional[str] = None) -> RelaySettings:
    """Build settings from the environment.

    Args:
        dotenv_path: Optional ``.env`` file loaded first; existing variables win.

    Raises:
        ConfigError: if any feed credential is missing or still a placeholder.
    """
    if dotenv_path:
        load_dotenv(dotenv_path)

    missing = [name for name in REQUIRED_CREDENTIALS if not is_configured_key(os.getenv(name))]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return RelaySettings(
        api_key=os.environ["CW_API_KEY"].strip(),
        api_secret=os.environ["CW_API_SECRET"].strip(),
        xsrf_token=os.environ["CW_XSRF_TOKEN"].strip(),
        source_urls=_parse_source_urls(os.getenv("CW_API_URLS")),
        upload_url=os.getenv("APP_FILEDITCH_URL") or DEFAULT_UPLOAD_URL,
        data_file_path=Path(os.getenv("APP_DATA_FILE_PATH") or "data.json").resolve(),
        host=os.getenv("APP_HOST") or "0.0.0.0",
        port=_int_from_env("APP_PORT", 5000),
        interval_seconds=_int_from_env("PROCESSING_INTERVAL_SECONDS", 120),
        request_timeout=_int_from_env("REQUEST_TIMEOUT", 30),
        upload_timeout=_int_from_env("UPLOAD_TIMEOUT", 300),
    )
