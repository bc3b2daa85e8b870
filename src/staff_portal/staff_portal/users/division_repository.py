from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .division_model import Division


class DivisionRepository(Protocol):
    def list_all(self) -> Sequence[Division]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Division]:
        raise NotImplementedError

    def create(self, *, name: str, description: Optional[str]) -> int:
        raise NotImplementedError
