"""Background task scheduling."""

from .scheduler import BackgroundTasks, ErrorSink

__all__ = ["BackgroundTasks", "ErrorSink"]
