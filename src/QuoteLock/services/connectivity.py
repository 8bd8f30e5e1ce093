"""Network connectivity probe used by the refresh connectivity gate."""

from __future__ import annotations

from dataclasses import dataclass

import requests

from QuoteLock.utils.log import log


@dataclass(frozen=True, slots=True)
class ConnectivityProbe:
    """Decide connectivity by issuing a HEAD request to a known URL.

    Attributes:
        check_url: URL to probe; None disables probing.
        timeout: Request timeout in seconds.
    """

    check_url: str | None = None
    timeout: float = 3.0

    def __call__(self) -> bool | None:
        """Probe the network.

        Returns:
            True when the URL answered, False on a transport error, None when
            no URL is configured (connectivity unknown).
        """
        if not self.check_url:
            return None
        try:
            requests.head(self.check_url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            log.debug("Connectivity probe failed: url=%s error=%s", self.check_url, e)
            return False
        return True
