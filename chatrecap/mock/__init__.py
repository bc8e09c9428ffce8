"""Offline scripted backend."""

from .backend import RecordedRequest, ScriptedBackend, chat_reply, completion_reply, echo_responder

__all__ = ["ScriptedBackend", "RecordedRequest", "chat_reply", "completion_reply", "echo_responder"]
