"""Selection of the entity store backend."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import choice_env_var


class StoreBackend(StrEnum):
    SQLALCHEMY = "sqlalchemy"
    FIRESTORE = "firestore"
    MEMORY = "memory"


@dataclass(frozen=True, slots=True)
class StoreConfig:
    backend: StoreBackend = StoreBackend.SQLALCHEMY


def get_store_config() -> StoreConfig:
    value = choice_env_var(
        "STOCKROOM_STORE",
        [backend.value for backend in StoreBackend],
        default=StoreBackend.SQLALCHEMY.value,
    )
    return StoreConfig(backend=StoreBackend(value))
