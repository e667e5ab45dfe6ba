"""
OrderService — places orders for customers with a known delivery address.

Addresses are learned from the addresses topic in a background thread. When a
schema registry client is supplied, orders are serialized with the registry's
JSON Schema serializer; otherwise as plain JSON.
"""

import json
import logging
import random
import uuid
from typing import Optional

from confluent_kafka.schema_registry import SchemaRegistryClient
from confluent_kafka.schema_registry.json_schema import JSONSerializer
from confluent_kafka.serialization import MessageField, SerializationContext
from faker import Faker
from pydantic import BaseModel

from owlshop.config import ShopConfig
from owlshop.kafka import KafkaFactory
from owlshop.models import Address, LineItem, Order, Payment, now_utc
from owlshop.services.base import KafkaService, Registry

PAYMENT_METHODS = ["CREDIT_CARD", "DEBIT", "PAYPAL", "INVOICE"]
QUANTITY_UNITS = ["PIECES", "PIECES", "PIECES", "GRAM", "LITRE"]


class OrderService(KafkaService):
    topic_name = "orders"

    def __init__(self, cfg: ShopConfig, kafka_factory: KafkaFactory,
                 sr_client: Optional[SchemaRegistryClient] = None, logger: logging.Logger = None):
        super().__init__(cfg, kafka_factory, logger or logging.getLogger("owlshop.order_svc"))
        self.fake = Faker()
        self.addresses: Registry[Address] = Registry()
        self.addresses_topic = cfg.topic("addresses")
        self.serializer = None
        if sr_client is not None:
            self.serializer = JSONSerializer(json.dumps(Order.model_json_schema()), sr_client)

    def serialize(self, value: BaseModel) -> bytes:
        if self.serializer is None:
            return super().serialize(value)
        return self.serializer(value.model_dump(mode="json"),
                               SerializationContext(self.topic, MessageField.VALUE))

    def start(self) -> None:
        self.consume_forever([self.addresses_topic], self.cfg.topic("order-svc"), self.handle_address)

    def handle_address(self, msg) -> None:
        value = msg.value()
        if value is None:
            return
        address = Address.model_validate_json(value)
        if address.type == "DELIVERY" or address.customer.id not in self.addresses:
            self.addresses.put(address.customer.id, address)

    def _fake_line_item(self) -> LineItem:
        quantity = random.randint(1, 5)
        unit_price = random.randint(99, 49_999)
        return LineItem(
            article_id=str(uuid.uuid4()),
            name=self.fake.catch_phrase(),
            quantity=quantity,
            quantity_unit=random.choice(QUANTITY_UNITS),
            unit_price=unit_price,
            total_price=quantity * unit_price,
        )

    def create_order(self) -> None:
        address = self.addresses.random()
        if address is None:
            self.logger.debug("No known addresses yet, skipping order creation")
            return

        items = [self._fake_line_item() for _ in range(random.randint(1, 5))]
        now = now_utc()
        order = Order(
            id=str(uuid.uuid4()),
            customer=address.customer,
            order_value=sum(item.total_price for item in items),
            line_items=items,
            payment=Payment(payment_id=str(uuid.uuid4()), method=random.choice(PAYMENT_METHODS)),
            delivery_address=address,
            created_at=now,
            last_updated_at=now,
        )
        if self.produce(order.id, order):
            self.logger.debug("Created order %s (%d items, %d cents)", order.id, len(items), order.order_value)
