"""Infrastructure: remote store adapters and the error channel."""
