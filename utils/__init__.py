"""Shared helpers: constants, errors, card values, threading and logging utilities."""
