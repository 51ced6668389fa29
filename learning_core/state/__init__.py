from .runtime import EventLoopThread

__all__ = ["EventLoopThread"]
