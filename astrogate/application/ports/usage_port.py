from __future__ import annotations

from typing import Protocol


class UsagePort(Protocol):
    def count_subjects(self, *, user_id: str) -> int:
        ...

    def get_ai_generations(self, *, user_id: str, day: str) -> int:
        ...
