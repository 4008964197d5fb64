"""Single HTTP exchange with a provider."""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from .config import config
from .errors import DecodeError, ProviderError, TransportError
from .providers import Model

logger = logging.getLogger(__name__)


def redact_url(url: str) -> str:
    """Hide credentials carried in the query string (Google puts its key there)."""
    parts = urlsplit(url)
    query = [
        (k, "***" if k.lower() in ("key", "api_key", "access_token") else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query, safe="*"), parts.fragment))


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(config.http_timeout, connect=config.connect_timeout)


async def post_json(
    url: str,
    body: Dict[str, Any],
    headers: Dict[str, str],
    model: Model,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """
    POST a JSON body and return the decoded success payload.

    Exactly one request is made. Raises:
    - TransportError on connection or I/O failure
    - ProviderError on a non-success status with a JSON body
    - DecodeError when a body cannot be parsed as JSON
    """
    logger.debug(f"POST {redact_url(url)} model={model.value}")

    try:
        if http_client is not None:
            response = await http_client.post(url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=default_timeout()) as client:
                response = await client.post(url, json=body, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Request to {redact_url(url)} failed: {e}")
        raise TransportError(f"Request to {redact_url(url)} failed: {e}") from e

    if response.is_success:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Failed to decode {model.display_name} response: {e}") from e

    logger.warning(f"{model.display_name} returned HTTP {response.status_code}")
    try:
        payload = response.json()
    except ValueError as e:
        raise DecodeError(f"Failed to parse response JSON: {e}") from e

    raise ProviderError(
        model=model.display_name,
        status_code=response.status_code,
        body=payload,
        formatted=json.dumps(payload, indent=2),
    )
