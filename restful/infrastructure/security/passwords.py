"""Password hashing with argon2id."""
from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

from restful.core.config import Settings


class PasswordHasher:
    def __init__(self, *, time_cost: int = 2, memory_cost: int = 51200, parallelism: int = 2) -> None:
        self._ph = _Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
            type=Type.ID,
        )

    @classmethod
    def from_settings(cls, cfg: Settings) -> "PasswordHasher":
        return cls(
            time_cost=cfg.password_time_cost,
            memory_cost=cfg.password_memory_cost,
            parallelism=cfg.password_parallelism,
        )

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
