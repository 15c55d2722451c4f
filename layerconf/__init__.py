"""Layered configuration store for scripts and services."""

__version__ = "0.1.0"
