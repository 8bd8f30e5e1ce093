"""Provider domain configuration: which quote source is active and its options."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from QuoteLock.config.common import (
    check_http_url,
    check_positive,
    expect_float,
    expect_int,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)

DEFAULT_FEED_URL = "https://www.brainyquote.com/link/quotebr.rss"


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Store validated quote provider settings.

    Attributes:
        name: Registered provider name.
        timeout: HTTP timeout in seconds for provider requests.
        jinrishici_token_env: Env var holding a pre-issued Jinrishici token.
        jinrishici_token: Token read from ``jinrishici_token_env`` (may be empty).
        feed_url: RSS/Atom feed used by the ``feed`` provider.
        feed_min_refresh_interval: Minimum refresh interval of the feed provider.
    """

    name: str
    timeout: float = 15.0
    jinrishici_token_env: str = "JINRISHICI_TOKEN"
    jinrishici_token: str = ""
    feed_url: str = DEFAULT_FEED_URL
    feed_min_refresh_interval: int = 86400


def load_provider(raw: Mapping[str, Any]) -> ProviderConfig:
    """Load the ``provider`` section.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "provider", required=True)
    jinrishici = get_section(section, "jinrishici", required=False)
    feed = get_section(section, "feed", required=False)

    token_env = expect_str(
        get_optional_value(jinrishici, "token_env", "JINRISHICI_TOKEN"),
        "provider.jinrishici.token_env",
    )
    return ProviderConfig(
        name=expect_str(get_required_value(section, "name", "provider.name"), "provider.name").strip().lower(),
        timeout=expect_float(get_optional_value(section, "timeout", 15.0), "provider.timeout"),
        jinrishici_token_env=token_env,
        jinrishici_token=os.getenv(token_env, "").strip(),
        feed_url=expect_str(get_optional_value(feed, "url", DEFAULT_FEED_URL), "provider.feed.url"),
        feed_min_refresh_interval=expect_int(
            get_optional_value(feed, "min_refresh_interval", 86400),
            "provider.feed.min_refresh_interval",
        ),
    )


def check_provider(config: ProviderConfig) -> None:
    """Validate provider domain constraints.

    Raises:
        ValueError: If values violate provider constraints.
    """
    from QuoteLock.sources.registry import supported_provider_names

    supported = supported_provider_names()
    if config.name not in supported:
        raise ValueError(f"provider.name must be one of {list(supported)}, got: {config.name}")
    check_positive(config.timeout, "provider.timeout")
    check_http_url(config.feed_url, "provider.feed.url", required=config.name == "feed")
    if config.feed_min_refresh_interval < 0:
        raise ValueError("provider.feed.min_refresh_interval must be >= 0")
