"""Omega Chess: rules engine with terminal and web front ends."""

__version__ = "0.1.0"
