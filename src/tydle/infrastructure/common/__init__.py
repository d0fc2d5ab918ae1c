"""Shared helpers for infrastructure adapters."""
