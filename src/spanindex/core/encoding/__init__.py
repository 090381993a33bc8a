"""Payload encoders for the output channels."""
