from salesbot.providers.base import GenerationBackend

__all__ = ["GenerationBackend"]
