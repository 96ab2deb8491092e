"""Shared API schemas."""

from .base import CustomBase, Page
from .problem_details import ProblemDetails, ValidationProblemDetails

__all__ = ["CustomBase", "Page", "ProblemDetails", "ValidationProblemDetails"]
