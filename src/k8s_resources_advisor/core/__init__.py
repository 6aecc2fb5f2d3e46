"""Configuration management with Pydantic validation."""

from k8s_resources_advisor.core.config import AppConfig, load_config

__all__ = ["AppConfig", "load_config"]
