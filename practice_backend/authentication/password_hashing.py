# practice_backend/authentication/password_hashing.py

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

# Slow, salted one-way hashing of account passwords (Argon2id)


class PasswordHashingService:
    def __init__(self, time_cost=3, memory_cost=65536, parallelism=4):
        self.ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=32,
            salt_len=16,
        )

    @classmethod
    def from_config(cls, config):
        return cls(
            time_cost=config.get("ARGON2_TIME_COST", 3),
            memory_cost=config.get("ARGON2_MEMORY_COST", 65536),
            parallelism=config.get("ARGON2_PARALLELISM", 4),
        )

    def hash_password(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        try:
            return self.ph.hash(password)
        except HashingError as e:
            raise ValueError(f"Password hashing failed: {str(e)}")

    def verify_password(self, password: str, hash_value: str) -> bool:
        if not password or not hash_value:
            return False
        try:
            return self.ph.verify(hash_value, password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hash_value: str) -> bool:
        return self.ph.check_needs_rehash(hash_value)
