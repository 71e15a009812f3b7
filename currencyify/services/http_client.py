from __future__ import annotations

"""Lightweight HTTP JSON client.

Uses stdlib urllib; a single GET per call with a hard timeout and no retries.
"""
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger("currencyify.http")


class HttpError(Exception):
    pass


def build_url(url: str, params: Optional[Mapping[str, str]] = None) -> str:
    if not params:
        return url
    sep = "&" if urllib.parse.urlparse(url).query else "?"
    return f"{url}{sep}{urllib.parse.urlencode(params)}"


def get_json(
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
) -> Any:
    full_url = build_url(url, params)
    req_headers: Dict[str, str] = {"Accept": "application/json"}
    req_headers.update(headers or {})
    request = urllib.request.Request(full_url, headers=req_headers, method="GET")
    logger.debug("GET %s", full_url)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            if resp.status >= 400:
                raise HttpError(f"HTTP {resp.status} for {url}")
            data = resp.read()
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {url}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise HttpError(f"Failed to fetch JSON from {url}: {e}") from e
    try:
        return json.loads(data.decode("utf-8"))
    except ValueError as e:
        raise HttpError(f"Invalid JSON from {url}: {e}") from e
