"""Utility functions for metrics handling."""

import metrics
from log import get_logger
from models.config import UpstreamConfiguration

logger = get_logger(__name__)


def setup_model_metrics(upstream_config: UpstreamConfiguration) -> None:
    """Set up model metrics from loaded configuration."""
    logger.info("Setting up model metrics")
    metrics.upstream_model_configuration.labels(upstream_config.model).set(1)
    logger.info("Model metrics setup complete")
