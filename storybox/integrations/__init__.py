"""Adapters for the remote generation service and media storage."""
