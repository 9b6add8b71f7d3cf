from .base import Transport, TransportSession

__all__ = ["Transport", "TransportSession"]
