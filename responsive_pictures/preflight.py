"""Dev-server reachability check run before launching any browser."""

from __future__ import annotations

import logging

import requests

logger = logging.getLogger("responsive_pictures")


def check_server(base_url: str, timeout: float = 5.0) -> bool:
    """Return True when ``base_url`` answers without a server error."""
    try:
        resp = requests.get(base_url, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Development server %s is unreachable: %s", base_url, exc)
        return False
    if resp.status_code >= 500:
        logger.error("Development server %s answered HTTP %d", base_url, resp.status_code)
        return False
    return True
