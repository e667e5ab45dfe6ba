import logging
from typing import Optional

from confluent_kafka.schema_registry import SchemaRegistryClient

from owlshop.config import SchemaRegistryConfig
from owlshop.errors import ServiceError

logger = logging.getLogger("owlshop.schema_registry")


class SchemaRegistryFactory:
    def __init__(self, cfg: SchemaRegistryConfig):
        self.cfg = cfg

    def new_client(self) -> Optional[SchemaRegistryClient]:
        """Returns None when no schema registry is configured."""
        if not self.cfg.enabled:
            logger.info("Schema registry not configured, using plain JSON")
            return None

        conf = {"url": self.cfg.url}
        if self.cfg.username:
            conf["basic.auth.user.info"] = f"{self.cfg.username}:{self.cfg.password or ''}"
        try:
            client = SchemaRegistryClient(conf)
        except Exception as e:
            raise ServiceError(f"failed to create schema registry client: {e}") from e
        logger.info("Schema registry client created for %s", self.cfg.url)
        return client
