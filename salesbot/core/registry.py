from __future__ import annotations

from typing import Dict

from salesbot.providers.base import GenerationBackend


class BackendRegistry:
    """Caller-constructed set of generation backends, keyed by backend name."""

    def __init__(self) -> None:
        self._backends: Dict[str, GenerationBackend] = {}

    def register(self, backend: GenerationBackend) -> None:
        if backend.name in self._backends:
            raise ValueError(f"Generation backend already registered: {backend.name}")
        self._backends[backend.name] = backend

    def get(self, name: str) -> GenerationBackend | None:
        return self._backends.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._backends

    def list_backends(self) -> list[GenerationBackend]:
        return list(self._backends.values())
