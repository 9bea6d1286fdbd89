"""Outbound rate limiting."""

from .flood import BucketState, FloodLimiter  # noqa: F401

__all__ = ["BucketState", "FloodLimiter"]
