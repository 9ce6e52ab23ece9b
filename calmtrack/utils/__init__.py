"""Shared utilities for calmtrack."""
