"""Bible Companion - scripture reading, annotations and a chat assistant."""

__version__ = "0.1.0"
