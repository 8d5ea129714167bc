"""Credential store interfaces and implementations.

Defines the `CredentialStore` protocol (per-provider secret strings behind a
get/set mapping) with an in-memory store and a JSON file store that persists
secrets across sessions.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from chorus.types import ProviderId

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chorus.config import Config

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Protocol for reading and writing provider secrets."""

    def get(self, provider: ProviderId) -> str | None:
        """Return the secret for *provider*, or None when absent or blank."""
        ...

    def set(self, provider: ProviderId, value: str) -> None:
        """Store the secret for *provider*."""
        ...

    def get_all(self) -> dict[ProviderId, str]:
        """Return every stored secret."""
        ...


def missing_credentials(
    store: CredentialStore, providers: Iterable[ProviderId]
) -> list[ProviderId]:
    """Return the providers in *providers* that have no usable secret."""
    return [p for p in providers if not store.get(p)]


def seed_from_env(store: CredentialStore, config: Config) -> list[ProviderId]:
    """Copy environment-provided API keys into *store* where it has none.

    Returns the providers that were seeded.
    """
    seeded: list[ProviderId] = []
    for provider, value in config.env_api_keys.items():
        if value and not store.get(provider):
            store.set(provider, value)
            seeded.append(provider)
    if seeded:
        logger.info(
            "Seeded credentials from environment: %s",
            ", ".join(p.value for p in seeded),
        )
    return seeded


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


class MemoryCredentialStore:
    """Credential store that lives only as long as the process."""

    def __init__(self, initial: dict[ProviderId, str] | None = None) -> None:
        self._data: dict[ProviderId, str] = {}
        for provider, value in (initial or {}).items():
            self.set(provider, value)

    def get(self, provider: ProviderId) -> str | None:
        return _clean(self._data.get(provider))

    def set(self, provider: ProviderId, value: str) -> None:
        self._data[ProviderId(provider)] = value

    def get_all(self) -> dict[ProviderId, str]:
        return {p: v for p, v in self._data.items() if _clean(v)}

    def __repr__(self) -> str:
        return f"MemoryCredentialStore(providers={[p.value for p in self.get_all()]})"


class JSONCredentialStore:
    """Credential store persisted as one JSON object ``{provider_id: secret}``.

    Uses copy-on-write: write to a temp file and rename for atomicity. The
    file is created readable by its owner only.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """Initialize the store pointing at a JSON file path."""
        self._path = Path(path)

    def get(self, provider: ProviderId) -> str | None:
        return _clean(self._read_all().get(ProviderId(provider)))

    def set(self, provider: ProviderId, value: str) -> None:
        data = self._read_all()
        data[ProviderId(provider)] = value
        self._write_all(data)

    def get_all(self) -> dict[ProviderId, str]:
        return {p: v for p, v in self._read_all().items() if _clean(v)}

    def _read_all(self) -> dict[ProviderId, str]:
        """Read the file into a mapping, ignoring unknown providers."""
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring credential file %s: not a JSON object", self._path)
            return {}

        data: dict[ProviderId, str] = {}
        for key, value in raw.items():
            try:
                provider = ProviderId(key)
            except ValueError:
                continue
            if isinstance(value, str):
                data[provider] = value
        return data

    def _write_all(self, data: dict[ProviderId, str]) -> None:
        """Persist data atomically via temp file rename."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        payload = json.dumps({p.value: v for p, v in data.items()}, indent=2)
        # O_CREAT only applies the mode to a new file.
        tmp.unlink(missing_ok=True)
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        tmp.replace(self._path)

    def __repr__(self) -> str:
        return f"JSONCredentialStore(path={str(self._path)!r})"
