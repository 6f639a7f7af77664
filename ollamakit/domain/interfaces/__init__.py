"""Domain interfaces - protocols defining contracts for implementations."""

from .ollama_api import OllamaApi, StreamingOllamaApi

__all__ = ["OllamaApi", "StreamingOllamaApi"]
