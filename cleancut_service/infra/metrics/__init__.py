"""Metrics infrastructure."""

from prometheus_client import generate_latest

from cleancut_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY", "generate_latest"]
