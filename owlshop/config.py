"""
Configuration is read once from the environment, validated, never reloaded.
"""

import os
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from owlshop.errors import ConfigError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_BOOTSTRAP = "localhost:9092"
DEFAULT_CLIENT_ID = "owlshop"
DEFAULT_REQUEST_RATE = 10
DEFAULT_REQUEST_RATE_INTERVAL = "1s"
DEFAULT_TOPIC_PREFIX = "owlshop-"
DEFAULT_STARTUP_TIMEOUT = "1m"
DEFAULT_METRICS_HOST = "0.0.0.0"
DEFAULT_METRICS_PORT = 8080

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(text: str) -> float:
    """Parse '250ms', '1s', '2m', '1h' or bare seconds into a positive float."""
    match = _DURATION_RE.match(str(text))
    if not match:
        raise ConfigError(f"invalid duration: {text!r}")
    value = float(match.group(1)) * _UNITS[match.group(2) or "s"]
    if value <= 0:
        raise ConfigError(f"duration must be positive: {text!r}")
    return value


def _parse_bool(text: str) -> bool:
    return text.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class KafkaConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    brokers: str = DEFAULT_BOOTSTRAP
    client_id: str = DEFAULT_CLIENT_ID
    sasl_mechanism: Optional[str] = None
    sasl_username: Optional[str] = None
    sasl_password: Optional[str] = None
    tls_enabled: bool = False

    def client_config(self) -> dict:
        """librdkafka settings shared by producers, consumers and admin clients."""
        conf = {
            "bootstrap.servers": self.brokers,
            "client.id": self.client_id,
        }
        if self.sasl_mechanism:
            conf["security.protocol"] = "SASL_SSL" if self.tls_enabled else "SASL_PLAINTEXT"
            conf["sasl.mechanism"] = self.sasl_mechanism
            conf["sasl.username"] = self.sasl_username or ""
            conf["sasl.password"] = self.sasl_password or ""
        elif self.tls_enabled:
            conf["security.protocol"] = "SSL"
        return conf


class SchemaRegistryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)


class ShopConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    request_rate: int = Field(DEFAULT_REQUEST_RATE, gt=0)
    request_rate_interval: float = Field(1.0, gt=0)  # seconds
    topic_prefix: str = DEFAULT_TOPIC_PREFIX
    topic_partitions: int = Field(6, gt=0)
    topic_replication_factor: int = Field(1, gt=0)
    startup_timeout: float = Field(60.0, gt=0)  # seconds

    def topic(self, name: str) -> str:
        return f"{self.topic_prefix}{name}"


class MetricsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_METRICS_HOST
    port: int = Field(DEFAULT_METRICS_PORT, gt=0, lt=65536)


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    kafka: KafkaConfig = KafkaConfig()
    schema_registry: SchemaRegistryConfig = SchemaRegistryConfig()
    shop: ShopConfig = ShopConfig()
    metrics: MetricsConfig = MetricsConfig()
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_config(env: Mapping[str, str] = os.environ, **shop_overrides) -> Config:
    """Build the process configuration from environment variables.

    ``shop_overrides`` take precedence over the environment (used by the CLI);
    ``None`` values are ignored.
    """
    try:
        shop = {
            "request_rate": int(env.get("SHOP_REQUEST_RATE", DEFAULT_REQUEST_RATE)),
            "request_rate_interval": parse_duration(
                env.get("SHOP_REQUEST_RATE_INTERVAL", DEFAULT_REQUEST_RATE_INTERVAL)
            ),
            "topic_prefix": env.get("SHOP_TOPIC_PREFIX", DEFAULT_TOPIC_PREFIX),
            "topic_partitions": int(env.get("SHOP_TOPIC_PARTITIONS", 6)),
            "topic_replication_factor": int(env.get("SHOP_TOPIC_REPLICATION_FACTOR", 1)),
            "startup_timeout": parse_duration(env.get("SHOP_STARTUP_TIMEOUT", DEFAULT_STARTUP_TIMEOUT)),
        }
        shop.update({k: v for k, v in shop_overrides.items() if v is not None})

        return Config(
            kafka=KafkaConfig(
                brokers=env.get("KAFKA_BOOTSTRAP", DEFAULT_BOOTSTRAP),
                client_id=env.get("KAFKA_CLIENT_ID", DEFAULT_CLIENT_ID),
                sasl_mechanism=env.get("KAFKA_SASL_MECHANISM") or None,
                sasl_username=env.get("KAFKA_SASL_USERNAME"),
                sasl_password=env.get("KAFKA_SASL_PASSWORD"),
                tls_enabled=_parse_bool(env.get("KAFKA_TLS_ENABLED", "false")),
            ),
            schema_registry=SchemaRegistryConfig(
                url=env.get("SCHEMA_REGISTRY_URL") or None,
                username=env.get("SCHEMA_REGISTRY_USERNAME"),
                password=env.get("SCHEMA_REGISTRY_PASSWORD"),
            ),
            shop=ShopConfig(**shop),
            metrics=MetricsConfig(
                host=env.get("METRICS_HOST", DEFAULT_METRICS_HOST),
                port=int(env.get("METRICS_PORT", DEFAULT_METRICS_PORT)),
            ),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"invalid configuration: {e}") from e
