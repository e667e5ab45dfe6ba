import threading
import time
from concurrent.futures import Future

import pytest

from owlshop.config import Config, ShopConfig


class FakeMessage:
    def __init__(self, topic, key, value, error=None):
        self._topic = topic
        self._key = key.encode("utf-8") if isinstance(key, str) else key
        self._value = value.encode("utf-8") if isinstance(value, str) else value
        self._error = error

    def topic(self):
        return self._topic

    def key(self):
        return self._key

    def value(self):
        return self._value

    def error(self):
        return self._error


class FakeProducer:
    def __init__(self):
        self.records = []
        self.raise_on_produce = None
        self._lock = threading.Lock()

    def produce(self, topic, key=None, value=None, on_delivery=None):
        if self.raise_on_produce is not None:
            raise self.raise_on_produce
        with self._lock:
            self.records.append((topic, key, value))

    def poll(self, timeout=None):
        return 0

    def flush(self, timeout=None):
        return 0


class FakeAdmin:
    def __init__(self, factory):
        self.factory = factory

    def create_topics(self, new_topics, request_timeout=None):
        futures = {}
        for topic in new_topics:
            fut = Future()
            error = self.factory.topic_errors.get(topic.topic)
            if error is not None:
                fut.set_exception(error)
            else:
                self.factory.created_topics.append(topic)
                fut.set_result(None)
            futures[topic.topic] = fut
        return futures


class FakeConsumer:
    def subscribe(self, topics):
        self.topics = topics

    def poll(self, timeout=None):
        time.sleep(0.05)
        return None

    def close(self):
        pass


class FakeKafkaFactory:
    def __init__(self):
        self.producers = []
        self.created_topics = []
        self.topic_errors = {}

    def new_producer(self, **overrides):
        producer = FakeProducer()
        self.producers.append(producer)
        return producer

    def new_consumer(self, group_id, **overrides):
        return FakeConsumer()

    def new_admin(self):
        return FakeAdmin(self)


@pytest.fixture
def kafka_factory():
    return FakeKafkaFactory()


@pytest.fixture
def shop_cfg():
    return ShopConfig()


@pytest.fixture
def deadline():
    return time.monotonic() + 5.0


@pytest.fixture
def make_config():
    def make(rate=10, interval=0.01, **shop):
        return Config(shop=ShopConfig(request_rate=rate, request_rate_interval=interval, **shop))
    return make
