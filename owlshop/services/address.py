"""
AddressService — creates addresses for customers it learns about from the
customers topic, which it consumes in a background thread.
"""

import logging
import random
import uuid

from faker import Faker

from owlshop.config import ShopConfig
from owlshop.kafka import KafkaFactory
from owlshop.models import Address, Customer, CustomerRef, now_utc
from owlshop.services.base import KafkaService, Registry

ADDRESS_TYPES = ["INVOICE", "DELIVERY"]


class AddressService(KafkaService):
    topic_name = "addresses"
    topic_config = {"cleanup.policy": "compact"}

    def __init__(self, cfg: ShopConfig, kafka_factory: KafkaFactory, logger: logging.Logger = None):
        super().__init__(cfg, kafka_factory, logger or logging.getLogger("owlshop.address_svc"))
        self.fake = Faker()
        self.customers: Registry[CustomerRef] = Registry()
        self.customers_topic = cfg.topic("customers")

    def start(self) -> None:
        self.consume_forever([self.customers_topic], self.cfg.topic("address-svc"), self.handle_customer)

    def handle_customer(self, msg) -> None:
        key = msg.key().decode("utf-8") if msg.key() else None
        if key is None:
            self.logger.warning("Customer record without key, skipping")
            return

        value = msg.value()
        if value is None:
            self.customers.remove(key)
            return
        customer = Customer.model_validate_json(value)
        self.customers.put(key, CustomerRef(id=customer.id, type=customer.customer_type))

    def create_address(self) -> None:
        customer = self.customers.random()
        if customer is None:
            self.logger.debug("No known customers yet, skipping address creation")
            return

        address = Address(
            id=str(uuid.uuid4()),
            customer=customer,
            type=random.choice(ADDRESS_TYPES),
            first_name=self.fake.first_name(),
            last_name=self.fake.last_name(),
            state=self.fake.state(),
            street=self.fake.street_name(),
            house_number=self.fake.building_number(),
            city=self.fake.city(),
            zip=self.fake.postcode(),
            latitude=float(self.fake.latitude()),
            longitude=float(self.fake.longitude()),
            phone=self.fake.phone_number(),
            additional_address_info=self.fake.secondary_address() if random.random() < 0.2 else "",
            created_at=now_utc(),
        )
        if self.produce(address.id, address):
            self.logger.debug("Created address %s for customer %s", address.id, customer.id)
