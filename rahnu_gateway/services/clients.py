"""Client onboarding and gold collateral registration"""

from typing import Any, Dict, List

from rahnu_gateway.domain.exceptions import ValidationError
from rahnu_gateway.domain.models import Client, GoldItem
from rahnu_gateway.domain.valuation import quantize_money, to_decimal, validate_purity
from rahnu_gateway.services.common import Service, reject_nulls

OPTIONAL_CLIENT_FIELDS = frozenset({"address", "state_of_residence", "religion", "race"})


class ClientService(Service):
    def list_clients(self) -> List[Client]:
        return self.storage.clients.list()

    def get_client(self, client_id: int) -> Client:
        return self.storage.clients.get(client_id)

    def create_client(self, fields: Dict[str, Any]) -> Client:
        with self.storage.transaction():
            return self.storage.clients.create(dict(fields))

    def update_client(self, client_id: int, fields: Dict[str, Any]) -> Client:
        if not fields:
            raise ValidationError("No fields to update")
        reject_nulls(fields, OPTIONAL_CLIENT_FIELDS)
        with self.storage.transaction():
            return self.storage.clients.update(client_id, dict(fields))


class GoldItemService(Service):
    """Gold items are immutable once registered"""

    def list_gold_items(self) -> List[GoldItem]:
        return self.storage.gold_items.list()

    def get_gold_item(self, item_id: int) -> GoldItem:
        return self.storage.gold_items.get(item_id)

    def create_gold_item(self, fields: Dict[str, Any]) -> GoldItem:
        fields = dict(fields)
        weight = to_decimal(fields.get("weight"), "weight")
        if weight <= 0:
            raise ValidationError("weight must be greater than zero", ["weight"])
        estimated_value = to_decimal(fields.get("estimated_value"), "estimated_value")
        if estimated_value < 0:
            raise ValidationError("estimated_value must not be negative", ["estimated_value"])

        fields["weight"] = weight
        fields["purity"] = validate_purity(fields.get("purity"))
        fields["estimated_value"] = quantize_money(estimated_value)

        with self.storage.transaction():
            return self.storage.gold_items.create(fields)
