"""Message pump: decoded stream to sinks."""

from .pump import MessagePump, ReportSink

__all__ = ["MessagePump", "ReportSink"]
