"""Tracking event normalization and transformation pipeline."""
