"""HTTP routes, request models, and dependencies."""
