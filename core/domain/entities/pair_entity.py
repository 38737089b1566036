from __future__ import annotations

from typing import Optional

from core.domain.entities.base_entity import DomainEntity


class TokenMetadataEntity(DomainEntity):
    """
    Display metadata for a token contract. symbol falls back to the contract name.
    """

    contract: str
    symbol: str
    logo: Optional[str] = None


class PairEntity(DomainEntity):
    """
    A DEX pair as announced by its PairCreated event.

    token0 is the base asset, token1 the quote asset (before inversion).
    """

    id: str
    token0: str
    token1: str

    token0_meta: Optional[TokenMetadataEntity] = None
    token1_meta: Optional[TokenMetadataEntity] = None

    @property
    def symbol0(self) -> str:
        return self.token0_meta.symbol if self.token0_meta else self.token0

    @property
    def symbol1(self) -> str:
        return self.token1_meta.symbol if self.token1_meta else self.token1

    def label(self, *, inverted: bool = False) -> str:
        """
        e.g. "XIAN/USDC", or "USDC/XIAN" when inverted.
        """
        if inverted:
            return f"{self.symbol1}/{self.symbol0}"
        return f"{self.symbol0}/{self.symbol1}"
