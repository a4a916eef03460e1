"""Shared helpers for remote-ssh."""
