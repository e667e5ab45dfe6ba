"""
FrontendService — emits page-view events as a web frontend would log them.
"""

import logging
import random
import uuid

from faker import Faker

from owlshop.config import ShopConfig
from owlshop.kafka import KafkaFactory
from owlshop.models import FrontendEvent, FrontendResponse, now_utc
from owlshop.services.base import KafkaService

PAGES = ["/", "/articles", "/articles/{id}", "/basket", "/checkout", "/login", "/register", "/search"]
METHODS = ["GET"] * 9 + ["POST"]
STATUS_CODES = [200] * 90 + [301, 304, 400, 401, 404, 404, 500, 502, 503, 200]


class FrontendService(KafkaService):
    topic_name = "frontend-events"
    topic_config = {"cleanup.policy": "delete", "retention.ms": str(7 * 24 * 3600 * 1000)}

    def __init__(self, cfg: ShopConfig, kafka_factory: KafkaFactory, logger: logging.Logger = None):
        super().__init__(cfg, kafka_factory, logger or logging.getLogger("owlshop.frontend_svc"))
        self.fake = Faker()

    def create_frontend_event(self) -> None:
        path = random.choice(PAGES).format(id=random.randint(1, 5000))
        event = FrontendEvent(
            correlation_id=str(uuid.uuid4()),
            ip_address=self.fake.ipv4_public(),
            method=random.choice(METHODS),
            requested_url=f"https://owlshop.example{path}",
            request_duration_ms=random.randint(5, 1500),
            response=FrontendResponse(
                size=random.randint(200, 250_000),
                status_code=random.choice(STATUS_CODES),
            ),
            headers={
                "accept": "text/html,application/xhtml+xml",
                "accept-language": self.fake.locale().replace("_", "-"),
                "referer": self.fake.url(),
                "user-agent": self.fake.user_agent(),
            },
            created_at=now_utc(),
        )
        self.produce(event.correlation_id, event)
