"""Refresh scheduling and connectivity configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from QuoteLock.config.common import (
    check_http_url,
    check_positive,
    expect_float,
    expect_int,
    expect_optional_str,
    get_optional_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class RefreshConfig:
    """Store validated background refresh settings.

    Attributes:
        check_every: Seconds between scheduled (non-forced) refresh attempts.
        check_url: URL probed to decide connectivity; None disables probing.
        check_timeout: Timeout in seconds of the connectivity probe.
    """

    check_every: int = 900
    check_url: str | None = None
    check_timeout: float = 3.0


def load_refresh(raw: Mapping[str, Any]) -> RefreshConfig:
    """Load the optional ``schedule`` and ``network`` sections."""
    schedule = get_section(raw, "schedule", required=False)
    network = get_section(raw, "network", required=False)
    return RefreshConfig(
        check_every=expect_int(get_optional_value(schedule, "check_every", 900), "schedule.check_every"),
        check_url=expect_optional_str(get_optional_value(network, "check_url", None), "network.check_url"),
        check_timeout=expect_float(get_optional_value(network, "check_timeout", 3.0), "network.check_timeout"),
    )


def check_refresh(config: RefreshConfig) -> None:
    """Validate refresh domain constraints.

    Raises:
        ValueError: If values violate refresh constraints.
    """
    check_positive(config.check_every, "schedule.check_every")
    check_positive(config.check_timeout, "network.check_timeout")
    check_http_url(config.check_url, "network.check_url")
