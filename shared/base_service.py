"""
Base service class for Rule Mapping Service components.
"""

from typing import Optional
import time

from prometheus_client import REGISTRY

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger
from shared.metrics import MetricsCollector, get_metrics_collector


class BaseService:
    """Base service class with common functionality."""

    def __init__(
        self,
        service_name: str,
        config: Optional[ServiceConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.service_name = service_name
        self.config = config or get_config(service_name)
        self.logger = get_logger(service_name)

        # Configure logging
        configure_logging(service_name, self.config.log_level)

        # Metrics are opt-in; an injected collector always wins
        if metrics is None and self.config.enable_metrics:
            metrics = get_metrics_collector(service_name, REGISTRY)
        self.metrics = metrics

        self._start_time = time.time()

    def start_metrics_server(self) -> bool:
        """Expose metrics over HTTP if metrics are enabled."""
        if self.metrics is None:
            self.logger.warning("Metrics disabled, not starting metrics server")
            return False

        self.metrics.start_metrics_server(self.config.metrics_port)
        self.logger.info("Metrics server started", port=self.config.metrics_port)
        return True

    def get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time
