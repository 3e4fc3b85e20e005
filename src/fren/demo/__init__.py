from .hello import HelloCounter

__all__ = ["HelloCounter"]
