"""Plugins built on top of the transformation core."""
