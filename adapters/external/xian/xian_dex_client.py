from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from adapters.external.xian.xian_graphql_client import XianGraphQLClient
from core.domain.errors import TradeFetchError


def _gql_str(value: str) -> str:
    """
    Quote a value as a GraphQL string literal (JSON string escaping is compatible).
    """
    return json.dumps(str(value))


class XianDexClient:
    """
    Client for the DEX pairs contract on a Xian node (events + state via GraphQL).

    - Pairs are announced by `PairCreated` events.
    - Trades are `Swap` events, indexed by pair.
    - Token symbol/logo live in state keys `<token>.metadata:token_symbol|token_logo_url`.
    """

    EVENT_FIELDS = """
        caller
        signer
        txHash
        dataIndexed
        data
        created
    """

    def __init__(self, *, http: XianGraphQLClient, pairs_contract: str = "con_pairs") -> None:
        self._http = http
        self._contract = str(pairs_contract).strip()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_swap_events(
        self,
        *,
        pair_id: str,
        created_after: Optional[str] = None,
        ascending: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        Fetch raw Swap event nodes for a pair.

        Note:
        - `created_after` is compared strictly (greaterThan) against the node's
          own `created` column, so passing back a previous `created` value verbatim
          never returns that trade again.
        """
        filters = [f"dataIndexed: {{contains: {{pair: {_gql_str(pair_id)}}}}}"]
        if created_after:
            filters.append(f"created: {{greaterThan: {_gql_str(created_after)}}}")

        filter_expr = ", ".join(filters)
        order_by = "CREATED_ASC" if ascending else "CREATED_DESC"

        q = f"""
        query GetSwapEvents {{
          allEvents(
            condition: {{contract: {_gql_str(self._contract)}, event: "Swap"}}
            filter: {{{filter_expr}}}
            orderBy: {order_by}
          ) {{
            edges {{
              node {{{self.EVENT_FIELDS}}}
            }}
          }}
        }}
        """
        data = await self._http.query(query=q)
        return self._edge_nodes(data)

    async def get_pair_created_events(self) -> List[Dict[str, Any]]:
        """
        Fetch raw PairCreated event nodes.
        """
        q = f"""
        query GetPairs {{
          allEvents(condition: {{contract: {_gql_str(self._contract)}, event: "PairCreated"}}) {{
            edges {{
              node {{
                dataIndexed
                data
              }}
            }}
          }}
        }}
        """
        data = await self._http.query(query=q)
        return self._edge_nodes(data)

    async def get_tokens_metadata(self, contracts: Sequence[str]) -> Dict[str, Dict[str, Optional[str]]]:
        """
        Fetch symbol and logo for many tokens in one aliased query.

        Returns:
            {contract: {"symbol": str | None, "logo": str | None}} for every requested contract.
        """
        contracts = list(dict.fromkeys(str(c) for c in contracts if c))
        if not contracts:
            return {}

        parts = []
        for i, token in enumerate(contracts):
            parts.append(
                f"""
            symbol_{i}: allStates(condition: {{key: {_gql_str(token + ".metadata:token_symbol")}}}) {{
              nodes {{ key value }}
            }}
            logo_{i}: allStates(condition: {{key: {_gql_str(token + ".metadata:token_logo_url")}}}) {{
              nodes {{ key value }}
            }}"""
            )
        q = "query GetTokensMetadata {" + "".join(parts) + "\n}"

        data = await self._http.query(query=q)
        out: Dict[str, Dict[str, Optional[str]]] = {}
        for i, token in enumerate(contracts):
            out[token] = {
                "symbol": self._first_state_value(data.get(f"symbol_{i}")),
                "logo": self._first_state_value(data.get(f"logo_{i}")),
            }
        return out

    @staticmethod
    def _edge_nodes(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        events = data.get("allEvents")
        if not isinstance(events, dict) or not isinstance(events.get("edges"), list):
            raise TradeFetchError(f"Unexpected allEvents shape: {data!r}")
        return [e["node"] for e in events["edges"] if isinstance(e, dict) and isinstance(e.get("node"), dict)]

    @staticmethod
    def _first_state_value(block: Any) -> Optional[str]:
        if not isinstance(block, dict):
            return None
        nodes = block.get("nodes") or []
        if not nodes or not isinstance(nodes[0], dict):
            return None
        value = nodes[0].get("value")
        if value is None:
            return None
        return value if isinstance(value, str) else json.dumps(value)
