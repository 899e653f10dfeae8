"""Built-in price list used when no pricing repository is wired in.

Prices are in KES per garment. Matching on garment type is
case-insensitive and ignores a trailing plural "s".
"""

from __future__ import annotations

from typing import Any

STANDARD_PRICES: dict[str, dict[str, int]] = {
    "shirt": {"wash": 150, "dry_clean": 250, "iron": 50, "starch": 30},
    "trousers": {"wash": 200, "dry_clean": 300, "iron": 60, "starch": 0},
    "suit": {"wash": 300, "dry_clean": 500, "iron": 150, "starch": 0},
    "dress": {"wash": 200, "dry_clean": 350, "iron": 80, "starch": 0},
    "jacket": {"wash": 250, "dry_clean": 400, "iron": 100, "starch": 0},
    "blanket": {"wash": 500, "dry_clean": 800, "iron": 0, "starch": 0},
    "curtain": {"wash": 400, "dry_clean": 600, "iron": 150, "starch": 0},
}


class StaticPricingRepository:
    """PricingRepository over STANDARD_PRICES; the same for every branch."""

    def __init__(self, prices: dict[str, dict[str, int]] | None = None) -> None:
        self._prices = prices if prices is not None else STANDARD_PRICES

    async def list_for_branch(self, branch_id: str) -> list[dict[str, Any]]:
        return [
            {"garment_type": garment_type, "services": dict(services)}
            for garment_type, services in self._prices.items()
        ]

    def _normalize(self, garment_type: str) -> str:
        key = garment_type.strip().lower()
        if key not in self._prices and key.endswith("s"):
            key = key[:-1]
        return key

    async def get_for_garment(self, branch_id: str, garment_type: str) -> dict[str, Any] | None:
        key = self._normalize(garment_type)
        services = self._prices.get(key)
        if services is None:
            return None
        return {"garment_type": key, "services": dict(services)}
