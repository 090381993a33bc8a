"""Span normalization and fan-out domain."""
