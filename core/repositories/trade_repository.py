from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from core.domain.entities.pair_entity import PairEntity, TokenMetadataEntity
from core.domain.entities.trade_record_entity import TradeRecordEntity


class TradeRepository(ABC):
    """
    Abstraction over the trade-data collaborator (swap events, pairs, token metadata).

    Implementations raise TradeFetchError when the source fails; they never
    return a partially read result.
    """

    @abstractmethod
    async def list_trades(
        self,
        pair_id: str,
        *,
        created_after: Optional[str] = None,
        ascending: bool = True,
    ) -> List[TradeRecordEntity]:
        """
        List swaps for a pair ordered by creation time.

        Args:
            pair_id: Pair identifier.
            created_after: Only trades created strictly after this timestamp
                (the source's own timestamp string).
            ascending: Oldest first when True, newest first otherwise.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_pairs(self) -> List[PairEntity]:
        """
        List known pairs, enriched with token metadata when available.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_token_metadata(self, contracts: Iterable[str]) -> Dict[str, TokenMetadataEntity]:
        """
        Resolve display metadata for token contracts (one entry per contract).
        """
        raise NotImplementedError

    async def get_pair(self, pair_id: str) -> Optional[PairEntity]:
        """
        Retrieve a single pair by id.
        """
        for pair in await self.list_pairs():
            if pair.id == str(pair_id):
                return pair
        return None
