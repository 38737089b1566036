from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.domain.entities.pair_entity import PairEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.errors import MalformedTradeError


class TradeNormalizationService:
    """
    Turns raw event nodes from the node's GraphQL API into domain entities.

    Event nodes look like:
      {
        "caller": "...", "signer": "...", "txHash": "...",
        "created": "2025-03-31T12:17:47.361237",
        "dataIndexed": {"pair": "1", ...} | '{"pair": "1"}',
        "data": {"amount0In": "0", "amount0Out": {"__fixed__": "10.5"}, ...} | '{...}'
      }

    Timestamps carry no zone offset and are UTC.
    Amounts that are missing, unparsable, negative or non-finite become 0.
    """

    AMOUNT_FIELDS = {
        "amount0_in": "amount0In",
        "amount0_out": "amount0Out",
        "amount1_in": "amount1In",
        "amount1_out": "amount1Out",
    }

    @staticmethod
    def parse_json_field(value: Any) -> Dict[str, Any]:
        """
        dataIndexed / data come either as objects or as JSON-encoded strings.
        """
        if value is None:
            return {}
        if isinstance(value, dict):
            return value
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except ValueError:
                return {}
            return parsed if isinstance(parsed, dict) else {}
        return {}

    @staticmethod
    def parse_amount(value: Any) -> float:
        # Xian encodes decimals as {"__fixed__": "123.45"}
        if isinstance(value, dict):
            value = value.get("__fixed__")
        if value is None or isinstance(value, bool):
            return 0.0
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(amount) or amount < 0:
            return 0.0
        return amount

    @staticmethod
    def parse_timestamp(created: Any) -> datetime:
        """
        Parse the node's `created` string as a UTC instant.

        Raises:
            MalformedTradeError: if missing or not ISO-8601.
        """
        if not isinstance(created, str) or not created.strip():
            raise MalformedTradeError(f"missing created timestamp: {created!r}")
        raw = created.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise MalformedTradeError(f"unparsable created timestamp: {created!r}") from exc
        if ts.tzinfo is None:
            return ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc)

    @staticmethod
    def format_timestamp(ts: datetime) -> str:
        """
        Inverse of parse_timestamp, in the node's own format (naive UTC, microseconds).
        """
        if ts.tzinfo is not None:
            ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
        return ts.isoformat(timespec="microseconds")

    @classmethod
    def trade_from_event(cls, node: Dict[str, Any], *, pair_id: Optional[str] = None) -> TradeRecordEntity:
        """
        Normalize one Swap event node.

        Args:
            node: Raw event node.
            pair_id: Pair the query was filtered on; used when dataIndexed lacks it.

        Raises:
            MalformedTradeError: if the timestamp or pair id cannot be determined.
        """
        if not isinstance(node, dict):
            raise MalformedTradeError(f"event node is not an object: {node!r}")

        indexed = cls.parse_json_field(node.get("dataIndexed"))
        data = cls.parse_json_field(node.get("data"))

        pair = indexed.get("pair", pair_id)
        if pair is None or str(pair).strip() == "":
            raise MalformedTradeError(f"swap event without pair id: {node!r}")

        created = node.get("created")
        timestamp = cls.parse_timestamp(created)

        amounts = {field: cls.parse_amount(data.get(key)) for field, key in cls.AMOUNT_FIELDS.items()}

        return TradeRecordEntity(
            pair_id=str(pair).strip(),
            created=str(created).strip(),
            timestamp=timestamp,
            signer=node.get("signer") or None,
            caller=node.get("caller") or None,
            tx_hash=node.get("txHash") or None,
            **amounts,
        )

    @classmethod
    def pair_from_event(cls, node: Dict[str, Any]) -> Optional[PairEntity]:
        """
        Normalize one PairCreated event node. Returns None when incomplete.
        """
        indexed = cls.parse_json_field(node.get("dataIndexed"))
        data = cls.parse_json_field(node.get("data"))

        pair_id = data.get("pair", indexed.get("pair"))
        token0 = indexed.get("token0", data.get("token0"))
        token1 = indexed.get("token1", data.get("token1"))
        if pair_id is None or not token0 or not token1:
            return None
        return PairEntity(id=str(pair_id), token0=str(token0), token1=str(token1))
