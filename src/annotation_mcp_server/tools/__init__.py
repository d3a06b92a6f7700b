"""Tool definitions and dispatch."""
