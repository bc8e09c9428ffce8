"""
Conversation core base package.

Provider-agnostic building blocks shared by the session layer:

- Errors: exception taxonomy and backend error classification
- Models (DTOs): turns, participant names, request config, model descriptors
- Interfaces: text backend and token oracle protocols
- Tokens, request shaping, history and background task scheduling
"""
