"""Exporter configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_TIMEOUT_SECONDS = 10.0

ENV_DATASOURCE = "SPANINDEX_DATASOURCE"
ENV_KAFKA_URL = "SPANINDEX_KAFKA_URL"


@dataclass(frozen=True)
class ExporterConfig:
    """Settings fixed once when the exporter is created.

    Attributes:
        datasource: URL of the analytical store's control plane.
        kafka_url: Broker bootstrap address (host:port).
        client_id: Client id reported to the broker.
        dial_timeout: Seconds allowed for a producer to connect.
        write_timeout: Seconds allowed for one broker request.
    """

    datasource: str
    kafka_url: str
    client_id: str = "spanindex"
    dial_timeout: float = DEFAULT_TIMEOUT_SECONDS
    write_timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.datasource.strip():
            raise ValueError("datasource must not be empty")
        if not self.kafka_url.strip():
            raise ValueError("kafka_url must not be empty")
        if self.dial_timeout <= 0 or self.write_timeout <= 0:
            raise ValueError("timeouts must be positive")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ExporterConfig":
        """Build a config from a host-provided mapping.

        Args:
            values: Mapping with "datasource" and "kafka_url", and optionally
                "client_id", "dial_timeout" and "write_timeout".

        Raises:
            ValueError: If a required key is missing or blank.
        """
        missing = [key for key in ("datasource", "kafka_url") if not values.get(key)]
        if missing:
            raise ValueError(f"missing required config keys: {', '.join(missing)}")
        return cls(
            datasource=str(values["datasource"]),
            kafka_url=str(values["kafka_url"]),
            client_id=str(values.get("client_id", "spanindex")),
            dial_timeout=float(values.get("dial_timeout", DEFAULT_TIMEOUT_SECONDS)),
            write_timeout=float(values.get("write_timeout", DEFAULT_TIMEOUT_SECONDS)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExporterConfig":
        """Build a config from SPANINDEX_DATASOURCE and SPANINDEX_KAFKA_URL."""
        env = os.environ if environ is None else environ
        return cls.from_mapping(
            {
                "datasource": env.get(ENV_DATASOURCE, ""),
                "kafka_url": env.get(ENV_KAFKA_URL, ""),
            }
        )
