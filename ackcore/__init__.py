"""Core types and helpers for Kubernetes controllers that manage AWS resources."""

__version__ = "0.1.0"