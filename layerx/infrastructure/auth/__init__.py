"""Token stores and unauthorized hooks."""
