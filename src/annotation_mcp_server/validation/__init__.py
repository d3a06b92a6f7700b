"""Closed-vocabulary validators for annotation values."""
