"""
The shop brings the producers online and simulates page impressions against them.

Every impression runs on its own daemon thread and is never waited for: the
offered rate is exact, the number of impressions still in flight is unbounded.
"""

import logging
import os
import threading
import time
from typing import Callable, Optional

from prometheus_client import Counter

from owlshop.chooser import Choice, Chooser
from owlshop.config import Config
from owlshop.errors import ServiceError
from owlshop.initializer import initialize_services, start_background
from owlshop.kafka import KafkaFactory
from owlshop.metrics import PAGE_IMPRESSIONS_SIMULATED, create_metrics_app, serve_metrics
from owlshop.services import AddressService, CustomerService, FrontendService, OrderService
from owlshop.sr import SchemaRegistryFactory

logger = logging.getLogger("owlshop.shop")


def exit_process(code: int = 1) -> None:
    """Terminate the whole process; sys.exit would only end the calling thread."""
    logging.shutdown()
    os._exit(code)


class Shop:
    def __init__(self, cfg: Config, chooser: Chooser,
                 impressions: Counter = PAGE_IMPRESSIONS_SIMULATED,
                 on_fatal: Callable[[int], None] = exit_process,
                 sleep: Callable[[float], None] = time.sleep):
        self.cfg = cfg
        self.chooser = chooser
        self.impressions = impressions
        self.on_fatal = on_fatal
        self.sleep = sleep

    @classmethod
    def from_config(cls, cfg: Config, kafka_factory: Optional[KafkaFactory] = None,
                    sr_factory: Optional[SchemaRegistryFactory] = None, **kwargs) -> "Shop":
        kafka_factory = kafka_factory or KafkaFactory(cfg.kafka)
        sr_factory = sr_factory or SchemaRegistryFactory(cfg.schema_registry)

        sr_client = sr_factory.new_client()

        try:
            customer_svc = CustomerService(cfg.shop, kafka_factory)
        except Exception as e:
            raise ServiceError(f"failed to create customer service: {e}") from e
        try:
            address_svc = AddressService(cfg.shop, kafka_factory)
        except Exception as e:
            raise ServiceError(f"failed to create address service: {e}") from e
        try:
            frontend_svc = FrontendService(cfg.shop, kafka_factory)
        except Exception as e:
            raise ServiceError(f"failed to create frontend service: {e}") from e
        try:
            order_svc = OrderService(cfg.shop, kafka_factory, sr_client)
        except Exception as e:
            raise ServiceError(f"failed to create order service: {e}") from e

        services = [
            ("customer", customer_svc),
            ("address", address_svc),
            ("frontend", frontend_svc),
            ("order", order_svc),
        ]
        initialize_services(services, timeout=cfg.shop.startup_timeout)
        start_background(services)

        chooser = Chooser([
            Choice(frontend_svc.create_frontend_event, 1000),
            Choice(customer_svc.create_customer, 50),
            Choice(address_svc.create_address, 30),
            Choice(customer_svc.delete_customer, 8),
            Choice(customer_svc.modify_customer, 6),
            Choice(order_svc.create_order, 5),
        ])
        return cls(cfg, chooser, **kwargs)

    def start(self) -> None:
        """Serve metrics and simulate traffic until the process is terminated."""
        serve_metrics(create_metrics_app(), self.cfg.metrics.host, self.cfg.metrics.port)
        logger.info(
            "Simulating %d page impressions every %.3fs",
            self.cfg.shop.request_rate, self.cfg.shop.request_rate_interval,
        )
        self.run()

    def run(self, ticks: Optional[int] = None) -> None:
        """Fire ``request_rate`` impressions per interval; forever when ``ticks`` is None."""
        rate = self.cfg.shop.request_rate
        interval = self.cfg.shop.request_rate_interval
        tick = 0
        while ticks is None or tick < ticks:
            for _ in range(rate):
                self.impressions.inc()
                self.simulate_page_impression()
            self.sleep(interval)
            tick += 1

    def simulate_page_impression(self) -> threading.Thread:
        """Simulate one visitor action (registration, order, page view, ...) on a new thread."""
        t = threading.Thread(target=self._impression, daemon=True)
        t.start()
        return t

    def _impression(self) -> None:
        try:
            fn = self.chooser.pick()
        except Exception:
            logger.critical("failed to pick a page impression", exc_info=True)
            self.on_fatal(1)
            return
        if not callable(fn):
            logger.critical("randomly picked method is not a func: %r", fn)
            self.on_fatal(1)
            return
        try:
            fn()
        except Exception:
            logger.critical("page impression %s failed", getattr(fn, "__qualname__", fn), exc_info=True)
            self.on_fatal(1)
