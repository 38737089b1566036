from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from adapters.external.xian.xian_dex_client import XianDexClient
from core.domain.entities.pair_entity import PairEntity, TokenMetadataEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity
from core.domain.errors import MalformedTradeError
from core.repositories.trade_repository import TradeRepository
from core.services.trade_normalization_service import TradeNormalizationService


class TradeRepositoryGraphQL(TradeRepository):
    """
    TradeRepository backed by a Xian node's GraphQL API.

    - Swap events are normalized into TradeRecordEntity; events that cannot be
      normalized are skipped with a warning (malformed_count keeps the total).
    - Token metadata is cached for the lifetime of the repository.
    """

    def __init__(self, client: XianDexClient, logger: logging.Logger | None = None):
        self._client = client
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._tokens: Dict[str, TokenMetadataEntity] = {}
        self.malformed_count = 0

    async def list_trades(
        self,
        pair_id: str,
        *,
        created_after: Optional[str] = None,
        ascending: bool = True,
    ) -> List[TradeRecordEntity]:
        nodes = await self._client.get_swap_events(
            pair_id=str(pair_id),
            created_after=created_after,
            ascending=ascending,
        )

        out: List[TradeRecordEntity] = []
        for node in nodes:
            try:
                out.append(TradeNormalizationService.trade_from_event(node, pair_id=str(pair_id)))
            except MalformedTradeError as exc:
                self.malformed_count += 1
                self._logger.warning(
                    "Skipping malformed swap event pair=%s (total skipped=%s): %s",
                    pair_id,
                    self.malformed_count,
                    exc,
                )
        return out

    async def list_pairs(self) -> List[PairEntity]:
        nodes = await self._client.get_pair_created_events()
        pairs = [p for p in (TradeNormalizationService.pair_from_event(n) for n in nodes) if p is not None]
        if not pairs:
            return []

        tokens = await self.get_token_metadata([t for p in pairs for t in (p.token0, p.token1)])
        return [
            p.model_copy(update={"token0_meta": tokens.get(p.token0), "token1_meta": tokens.get(p.token1)})
            for p in pairs
        ]

    async def get_token_metadata(self, contracts: Iterable[str]) -> Dict[str, TokenMetadataEntity]:
        wanted = list(dict.fromkeys(str(c) for c in contracts if c))
        missing = [c for c in wanted if c not in self._tokens]

        if missing:
            fetched = await self._client.get_tokens_metadata(missing)
            for contract in missing:
                meta = fetched.get(contract) or {}
                self._tokens[contract] = TokenMetadataEntity(
                    contract=contract,
                    symbol=meta.get("symbol") or contract,
                    logo=meta.get("logo"),
                )
            self._logger.debug("Fetched metadata for %s token(s)", len(missing))

        return {c: self._tokens[c] for c in wanted}
