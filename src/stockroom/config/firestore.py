"""Firestore REST configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig

FIRESTORE_API_URL: Final[str] = "https://firestore.googleapis.com/v1"
FIRESTORE_TIMEOUT_SECONDS: Final[float] = 15.0
DEFAULT_DATABASE: Final[str] = "(default)"
EMULATOR_TOKEN: Final[str] = "owner"


@dataclass(frozen=True, slots=True)
class FirestoreConfig:
    """Holds the coordinates and credentials of one Firestore database."""

    project_id: str
    resilience: ResilienceConfig
    database: str = DEFAULT_DATABASE
    access_token: str | None = None
    emulator_host: str | None = None

    @property
    def api_url(self) -> str:
        if self.emulator_host:
            return f"http://{self.emulator_host}/v1"
        return FIRESTORE_API_URL

    @property
    def documents_url(self) -> str:
        return f"{self.api_url}/projects/{self.project_id}/databases/{self.database}/documents"

    @property
    def bearer_token(self) -> str | None:
        if self.access_token:
            return self.access_token
        if self.emulator_host:
            return EMULATOR_TOKEN
        return None


def get_firestore_config(*, resilience: ResilienceConfig | None = None) -> FirestoreConfig:
    values = require_env_vars(("FIRESTORE_PROJECT_ID",))
    emulator_host = optional_env_var("FIRESTORE_EMULATOR_HOST")
    return FirestoreConfig(
        project_id=values["FIRESTORE_PROJECT_ID"],
        database=optional_env_var("FIRESTORE_DATABASE", DEFAULT_DATABASE) or DEFAULT_DATABASE,
        access_token=optional_env_var("FIRESTORE_ACCESS_TOKEN"),
        emulator_host=emulator_host,
        resilience=resilience
        or ResilienceConfig(name="firestore", timeout_seconds=FIRESTORE_TIMEOUT_SECONDS),
    )
