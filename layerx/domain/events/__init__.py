"""Domain Events emitted by the request dispatcher."""
