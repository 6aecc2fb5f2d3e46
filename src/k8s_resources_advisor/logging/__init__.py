"""Logging configuration for k8s_resources_advisor."""

from k8s_resources_advisor.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
