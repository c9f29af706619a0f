"""Store model. Stores belong to a chain, the tenant scope used for data isolation."""

from tortoise import fields
from ...common.models import TimestampMixin


class Store(TimestampMixin):
    id = fields.IntField(primary_key=True)
    chain_id = fields.IntField(db_index=True)
    name = fields.CharField(max_length=255)
    address = fields.TextField(null=True)
    is_active = fields.BooleanField(default=True)

    orders: fields.ReverseRelation["Order"]
    inventory: fields.ReverseRelation["Inventory"]
    alerts: fields.ReverseRelation["Alert"]

    def __str__(self):
        return f"{self.name} (chain {self.chain_id})"

    class Meta:
        table = "stores"
