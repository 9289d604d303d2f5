"""Application wiring: storage, queue, service and web front end."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from flask import Flask

from .kafka_dao import KafkaDao
from .logging_utils import component_logger
from .models import AppConfig
from .redis_dao import RedisDao
from .scylla_dao import ScyllaDao
from .service import NotificationService
from .web import create_app

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3333


@dataclass
class Application:
    """A fully wired service: its config, business layer, queue access and web app."""

    config: AppConfig
    service: NotificationService
    kafka_dao: KafkaDao
    web: Flask
    _consumer_thread: threading.Thread | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def start_consumer(self) -> threading.Thread:
        """Start consuming queue messages in a background thread; idempotent."""
        with self._lock:
            if self._consumer_thread is None:
                component_logger("app").info("Starting Kafka consumer in background")
                thread = threading.Thread(
                    target=self.kafka_dao.consume,
                    args=(self.service,),
                    name="kafka-consumer",
                    daemon=True,
                )
                thread.start()
                self._consumer_thread = thread
            return self._consumer_thread

    def run(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        """Start the consumer and serve the HTTP API until interrupted."""
        self.start_consumer()
        self.web.run(host=host, port=port)


def new_app(
    app_config: AppConfig,
    redis_client: Any,
    scylla_session: Any,
    producer: Any,
    consumer: Any,
) -> Application:
    """Wire the data stores, queue and service into an application."""
    log = component_logger("app")
    log.info("Starting application initialization")

    if producer is None or consumer is None:
        log.critical("Failed to initialize Kafka producer or consumer")
        raise ValueError("Failed to initialize Kafka producer or consumer")

    log.info("Initializing Kafka DAO")
    kafka_dao = KafkaDao(producer, consumer)

    log.info("Initializing notification service")
    service = NotificationService(RedisDao(redis_client), ScyllaDao(scylla_session))

    web = create_app(service, kafka_dao)
    log.info("Application initialization completed successfully")
    return Application(config=app_config, service=service, kafka_dao=kafka_dao, web=web)