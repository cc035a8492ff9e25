"""HTTP adapter exposing `explorer_core` payloads over FastAPI."""
