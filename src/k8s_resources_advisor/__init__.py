"""Per-container Kubernetes resource reports with usage-based recommendations."""

from k8s_resources_advisor.__version__ import __version__

__all__ = ["__version__"]
