"""
CustomerService — registers, modifies and deletes customers on a compacted topic.
"""

import logging
import random
import uuid

from faker import Faker

from owlshop.config import ShopConfig
from owlshop.kafka import KafkaFactory
from owlshop.models import Company, Customer, now_utc
from owlshop.services.base import KafkaService, Registry

CUSTOMER_TYPES = ["PERSONAL", "BUSINESS"]


class CustomerService(KafkaService):
    topic_name = "customers"
    topic_config = {"cleanup.policy": "compact"}

    def __init__(self, cfg: ShopConfig, kafka_factory: KafkaFactory, logger: logging.Logger = None):
        super().__init__(cfg, kafka_factory, logger or logging.getLogger("owlshop.customer_svc"))
        self.fake = Faker()
        self.customers: Registry[Customer] = Registry()

    def _fake_company(self) -> Company:
        return Company(name=self.fake.company(), motto=self.fake.catch_phrase())

    def _fake_customer(self) -> Customer:
        gender = random.choice(["female", "male"])
        first = self.fake.first_name_female() if gender == "female" else self.fake.first_name_male()
        customer_type = random.choice(CUSTOMER_TYPES)
        now = now_utc()
        return Customer(
            id=str(uuid.uuid4()),
            first_name=first,
            last_name=self.fake.last_name(),
            gender=gender,
            email=self.fake.email(),
            customer_type=customer_type,
            company=self._fake_company() if customer_type == "BUSINESS" else None,
            created_at=now,
            last_modified_at=now,
        )

    def create_customer(self) -> None:
        customer = self._fake_customer()
        self.customers.put(customer.id, customer)
        if self.produce(customer.id, customer):
            self.logger.debug("Created customer %s", customer.id)

    def modify_customer(self) -> None:
        customer = self.customers.random()
        if customer is None:
            self.logger.debug("No customers to modify yet")
            return

        changes = {
            "email": self.fake.email(),
            "revision": customer.revision + 1,
            "last_modified_at": now_utc(),
        }
        if customer.customer_type == "BUSINESS":
            changes["company"] = self._fake_company()
        modified = customer.model_copy(update=changes)
        self.customers.put(modified.id, modified)
        if self.produce(modified.id, modified):
            self.logger.debug("Modified customer %s (revision %d)", modified.id, modified.revision)

    def delete_customer(self) -> None:
        customer = self.customers.random()
        if customer is None:
            self.logger.debug("No customers to delete yet")
            return
        if self.customers.remove(customer.id) is None:
            # removed concurrently by another impression
            return
        if self.produce(customer.id, None):
            self.logger.debug("Deleted customer %s", customer.id)
