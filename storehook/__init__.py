"""storehook: outbound webhooks for store events."""

__version__ = "1.0.0"
