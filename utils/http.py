# -*- coding: utf-8 -*-
"""HTTP helper for fetching JSON contract lists."""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import requests

logger = logging.getLogger("utils.http")

DEFAULT_HEADERS = {
    "User-Agent": "sep20-resolver/1.0",
    "Accept": "application/json",
}


def get_json_list(url: str, key: str = "contracts", timeout: int = 10, retries: int = 1) -> Optional[List[Any]]:
    """GET ``url`` and return its JSON list (or the list under ``key``).

    Returns ``None`` when the request keeps failing or the body is not a list.
    """
    for attempt in range(retries + 1):
        try:
            response = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            if attempt >= retries:
                logger.debug("GET %s failed: %s", url, exc)
                return None
            time.sleep(0.5 * (2 ** attempt))
            continue
        if isinstance(data, dict):
            data = data.get(key)
        if not isinstance(data, list):
            logger.debug("GET %s: expected a JSON list, got %s", url, type(data).__name__)
            return None
        return data
    return None
