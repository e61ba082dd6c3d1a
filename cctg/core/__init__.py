"""Shared helpers for cctg."""
