"""
Shared plumbing for the shop's event producers.
"""

import logging
import random
import threading
import time
from typing import Dict, Generic, List, Optional, Sequence, TypeVar

from confluent_kafka import KafkaException
from pydantic import BaseModel

from owlshop.config import ShopConfig
from owlshop.errors import DeadlineExceeded
from owlshop.initializer import remaining
from owlshop.kafka import KafkaFactory, create_topic, delivery_report

T = TypeVar("T")

RECONNECT_DELAY = 5


class Registry(Generic[T]):
    """Thread-safe keyed collection with O(1) random pick and removal."""

    def __init__(self):
        self._lock = threading.Lock()
        self._keys: List[str] = []
        self._index: Dict[str, int] = {}
        self._items: Dict[str, T] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def put(self, key: str, item: T) -> None:
        with self._lock:
            if key not in self._items:
                self._index[key] = len(self._keys)
                self._keys.append(key)
            self._items[key] = item

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._items.get(key)

    def remove(self, key: str) -> Optional[T]:
        with self._lock:
            if key not in self._items:
                return None
            idx = self._index.pop(key)
            last = self._keys.pop()
            if last != key:
                self._keys[idx] = last
                self._index[last] = idx
            return self._items.pop(key)

    def random(self, rng=random) -> Optional[T]:
        with self._lock:
            if not self._keys:
                return None
            return self._items[self._keys[rng.randrange(len(self._keys))]]


class KafkaService:
    """A producer owning one topic: creates it on initialize and publishes to it."""

    topic_name = ""
    topic_config: Dict[str, str] = {}

    def __init__(self, cfg: ShopConfig, kafka_factory: KafkaFactory, logger: logging.Logger):
        self.cfg = cfg
        self.kafka_factory = kafka_factory
        self.logger = logger
        self.topic = cfg.topic(self.topic_name)
        self.producer = kafka_factory.new_producer()
        self._on_delivery = delivery_report(logger)

    def initialize(self, deadline: float) -> None:
        if remaining(deadline) <= 0:
            raise DeadlineExceeded(f"startup deadline passed before creating topic '{self.topic}'")
        admin = self.kafka_factory.new_admin()
        create_topic(
            admin,
            self.topic,
            partitions=self.cfg.topic_partitions,
            replication_factor=self.cfg.topic_replication_factor,
            config=self.topic_config,
            timeout=remaining(deadline),
        )

    def serialize(self, value: BaseModel) -> bytes:
        return value.model_dump_json().encode("utf-8")

    def produce(self, key: str, value: Optional[BaseModel]) -> bool:
        """Publish one record; ``None`` produces a tombstone. Failures are logged, not raised."""
        try:
            payload = None if value is None else self.serialize(value)
            self.producer.produce(self.topic, key=key.encode("utf-8"), value=payload,
                                  on_delivery=self._on_delivery)
            self.producer.poll(0)
            return True
        except BufferError:
            self.logger.warning("Local producer queue is full, dropping record %s", key)
        except KafkaException as e:
            self.logger.error("Failed to produce record %s to %s: %s", key, self.topic, e)
        except Exception as e:
            self.logger.error("Failed to serialize record %s for %s: %s", key, self.topic, e)
        return False

    # -----------------------------------------------------------------------
    # Background consumption
    # -----------------------------------------------------------------------

    def consume_forever(self, topics: Sequence[str], group_id: str, handle) -> None:
        """Consume ``topics`` until the process exits, reconnecting after errors."""
        while True:
            consumer = None
            try:
                consumer = self.kafka_factory.new_consumer(group_id)
                consumer.subscribe(list(topics))
                self.logger.info("Consuming %s as group=%s", ",".join(topics), group_id)
                while True:
                    msg = consumer.poll(1.0)
                    if msg is None:
                        continue
                    if msg.error():
                        self.logger.warning("Kafka poll error: %s", msg.error())
                        continue
                    try:
                        handle(msg)
                    except Exception as e:
                        self.logger.error("Error processing record from %s: %s", msg.topic(), e)
            except KafkaException as e:
                self.logger.warning("Consumer lost connection (%s), reconnecting in %ds...", e, RECONNECT_DELAY)
            except Exception as e:
                self.logger.error("Consumer error: %s, restarting in %ds...", e, RECONNECT_DELAY)
            finally:
                if consumer is not None:
                    try:
                        consumer.close()
                    except Exception as e:
                        self.logger.debug("Error closing consumer: %s", e)
            time.sleep(RECONNECT_DELAY)
