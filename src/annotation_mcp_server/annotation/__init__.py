"""Annotation engine: merge rules, batch processing, relations, export."""
