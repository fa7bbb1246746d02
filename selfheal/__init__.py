"""selfheal: turns Alertmanager alerts into Kubernetes recovery actions."""

__version__ = "0.1.0"
