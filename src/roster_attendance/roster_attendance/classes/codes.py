from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, field
from typing import Callable

from ..core.constants import (
    CLASS_CODE_ALPHABET,
    CLASS_CODE_ATTEMPTS_PER_LENGTH,
    CLASS_CODE_LENGTH,
    CLASS_CODE_MAX_LENGTH,
)


@dataclass
class JoinCodeGenerator:
    """Samples uppercase alphanumeric join-codes until one is free.

    Starts at 6 characters and only widens (up to 8) after repeated collisions.
    """

    rng: random.Random = field(default_factory=secrets.SystemRandom)
    attempts_per_length: int = CLASS_CODE_ATTEMPTS_PER_LENGTH

    def sample(self, length: int = CLASS_CODE_LENGTH) -> str:
        return "".join(self.rng.choice(CLASS_CODE_ALPHABET) for _ in range(length))

    def generate(self, is_taken: Callable[[str], bool]) -> str:
        for length in range(CLASS_CODE_LENGTH, CLASS_CODE_MAX_LENGTH + 1):
            for _ in range(self.attempts_per_length):
                code = self.sample(length)
                if not is_taken(code):
                    return code
        raise RuntimeError("Could not allocate a unique class code")
