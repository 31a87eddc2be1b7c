from .time import utcnow

__all__ = ["utcnow"]
