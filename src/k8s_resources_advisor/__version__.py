"""Version information for k8s_resources_advisor."""

__version__ = "0.3.0"
