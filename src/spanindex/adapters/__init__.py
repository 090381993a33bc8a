"""Adapters connecting the core to brokers, SDKs and storage."""
