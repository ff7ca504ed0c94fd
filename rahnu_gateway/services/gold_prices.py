"""Gold spot price series and valuation quotes"""

from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rahnu_gateway.config import settings
from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.models import GoldPriceQuote, Valuation
from rahnu_gateway.domain.valuation import compute_valuation, to_decimal
from rahnu_gateway.services.common import Service
from rahnu_gateway.utils.date_utils import ensure_utc


class GoldPriceService(Service):
    def current_price(self) -> GoldPriceQuote:
        """Most recent quote; seeds the configured default when the series is empty"""
        quotes = self.storage.gold_prices.list()
        if quotes:
            return max(quotes, key=lambda q: (q.date, q.id))
        return self.record_price({"price_per_ounce": settings.default_gold_price_per_ounce})

    def price_history(self, days: int) -> List[GoldPriceQuote]:
        if days < 0:
            raise ValidationError("days must not be negative", ["days"])
        cutoff = self.now() - timedelta(days=days)
        quotes = [q for q in self.storage.gold_prices.list() if q.date >= cutoff]
        return sorted(quotes, key=lambda q: (q.date, q.id))

    def record_price(self, fields: Dict[str, Any]) -> GoldPriceQuote:
        fields = dict(fields)
        price = to_decimal(fields.get("price_per_ounce"), "price_per_ounce")
        if price <= 0:
            raise ValidationError("price_per_ounce must be greater than zero", ["price_per_ounce"])
        fields["price_per_ounce"] = price
        fields["date"] = ensure_utc(fields["date"]) if fields.get("date") is not None else self.now()
        with self.storage.transaction():
            return self.storage.gold_prices.create(fields)

    def value_gold(
        self,
        weight_grams: Decimal,
        purity_karat: int,
        financing_ratio: Decimal,
        price_per_ounce: Optional[Decimal] = None,
    ) -> Valuation:
        """Valuation at the given price, or at the current quote when omitted"""
        if price_per_ounce is None:
            price_per_ounce = self.current_price().price_per_ounce
        return compute_valuation(weight_grams, purity_karat, price_per_ounce, financing_ratio)
