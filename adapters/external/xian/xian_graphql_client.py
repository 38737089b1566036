from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from core.domain.errors import TradeFetchError


class XianGraphQLClient:
    """
    Minimal client for a Xian node's GraphQL endpoint.

    Uses POST JSON:
      { "query": "...", "variables": {...} }

    Transport failures, non-2xx statuses and GraphQL `errors` payloads all
    surface as TradeFetchError.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        timeout_s: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = str(endpoint).strip()
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s, connect=5.0),
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query(self, *, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a query and return its `data` object.
        """
        headers = {"Content-Type": "application/json"}
        payload = {
            "query": query,
            "variables": variables or {},
        }
        try:
            r = await self._client.post(self._endpoint, headers=headers, json=payload)
            r.raise_for_status()
            body = r.json()
        except httpx.HTTPStatusError as exc:
            raise TradeFetchError(
                f"GraphQL endpoint returned HTTP {exc.response.status_code}: {self._endpoint}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TradeFetchError(f"GraphQL request failed ({exc.__class__.__name__}): {self._endpoint}") from exc
        except ValueError as exc:
            raise TradeFetchError(f"GraphQL endpoint returned invalid JSON: {self._endpoint}") from exc

        if not isinstance(body, dict):
            raise TradeFetchError(f"Unexpected GraphQL response: {body!r}")
        if body.get("errors"):
            messages = "; ".join(str(e.get("message", e) if isinstance(e, dict) else e) for e in body["errors"])
            raise TradeFetchError(f"GraphQL errors: {messages}")

        data = body.get("data")
        if not isinstance(data, dict):
            raise TradeFetchError(f"GraphQL response without data: {body!r}")
        return data
