"""
Kafka client construction and topic management.
"""

import logging
from typing import Dict, Optional

from confluent_kafka import Consumer, KafkaError, KafkaException, Producer
from confluent_kafka.admin import AdminClient, NewTopic

from owlshop.config import KafkaConfig
from owlshop.errors import ServiceError

logger = logging.getLogger("owlshop.kafka")


class KafkaFactory:
    """Creates Kafka clients that all share one connection config."""

    def __init__(self, cfg: KafkaConfig):
        self.cfg = cfg

    def new_producer(self, **overrides) -> Producer:
        conf = self.cfg.client_config()
        conf.update({"linger.ms": 10, "acks": "all"})
        conf.update(overrides)
        return Producer(conf)

    def new_consumer(self, group_id: str, **overrides) -> Consumer:
        conf = self.cfg.client_config()
        conf.update({
            "group.id": group_id,
            "auto.offset.reset": "earliest",
            "enable.auto.commit": True,
        })
        conf.update(overrides)
        return Consumer(conf)

    def new_admin(self) -> AdminClient:
        return AdminClient(self.cfg.client_config())


def delivery_report(log: logging.Logger):
    """on_delivery callback that logs failed deliveries."""

    def report(err, msg):
        if err is not None:
            log.error("Delivery to %s failed: %s", msg.topic(), err)

    return report


def create_topic(admin: AdminClient, name: str, partitions: int, replication_factor: int,
                 config: Optional[Dict[str, str]] = None, timeout: float = 30.0) -> None:
    """Create a topic; an already existing topic counts as success."""
    topic = NewTopic(name, num_partitions=partitions, replication_factor=replication_factor,
                     config=config or {})
    futures = admin.create_topics([topic], request_timeout=timeout)
    try:
        futures[name].result(timeout=timeout)
        logger.info("Created topic '%s' (%d partitions)", name, partitions)
    except KafkaException as e:
        err = e.args[0] if e.args else None
        if isinstance(err, KafkaError) and err.code() == KafkaError.TOPIC_ALREADY_EXISTS:
            logger.info("Topic '%s' already exists", name)
            return
        raise ServiceError(f"failed to create topic '{name}': {e}") from e
    except Exception as e:
        raise ServiceError(f"failed to create topic '{name}': {e}") from e
