"""Persisted registry of connection targets.

The registry is a YAML file mapping each DSN to its display name and the
last time the pool handed it out::

    connections:
      ./local.db:
        name: local
        dsn: ./local.db
        last_used_at: '2024-03-01T10:30:45.123456+00:00'

Every change rewrites the whole file through a temporary file and an
atomic rename.
"""

import asyncio
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pydantic
import yaml

from ..config.models import RegistryConfig
from ..core.exceptions import ErrorCodes, RegistryError
from ..core.utils import ValidationUtils
from ..logging import get_logger
from .models import PersistedConnection

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionRegistry:
    """YAML-backed store of connection targets keyed by DSN.

    Implements the ``ConnectionStore`` protocol consumed by the pool. The
    file is read once, off the event loop, on first use; ``get``, ``in``
    and ``len`` only consult what is already in memory.

    Example:
        >>> registry = ConnectionRegistry.from_config_dir(Path("~/.config").expanduser())
        >>> await registry.add_connection("local", "./local.db")
        >>> [entry.name for entry in await registry.get_connections()]
        ['local']
    """

    def __init__(self, path: Union[str, Path], *, clock: Clock = _utcnow) -> None:
        """Initialize registry.

        Args:
            path: Registry file; created with its directory on first write
            clock: Source of ``last_used_at`` timestamps
        """
        self.path = Path(path)
        self._clock = clock
        self._entries: Optional[Dict[str, PersistedConnection]] = None
        self._lock = asyncio.Lock()
        self.logger = get_logger("sqlwatch.database.registry")

    @classmethod
    def from_config_dir(cls, base: Union[str, Path], **kwargs: Any) -> "ConnectionRegistry":
        """Registry at ``<base>/sqlwatch/config.yaml``."""
        return cls.from_config(RegistryConfig(config_dir=Path(base)), **kwargs)

    @classmethod
    def from_config(cls, config: RegistryConfig, **kwargs: Any) -> "ConnectionRegistry":
        return cls(config.path, **kwargs)

    def _read(self) -> Dict[str, PersistedConnection]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise RegistryError(
                f"read registry: {e}",
                code=ErrorCodes.REGISTRY_READ_FAILED,
                context={"path": str(self.path)},
                cause=e,
            ) from e

        try:
            document = yaml.safe_load(text) or {}
            if not isinstance(document, dict):
                raise ValueError("top level must be a mapping")
            connections = document.get("connections") or {}
            if not isinstance(connections, dict):
                raise ValueError("'connections' must be a mapping")
            entries = {}
            for dsn, entry in connections.items():
                if not isinstance(entry, dict):
                    raise ValueError(f"entry for {dsn!r} must be a mapping")
                entries[str(dsn)] = PersistedConnection(**{**entry, "dsn": str(dsn)})
        except (yaml.YAMLError, ValueError, pydantic.ValidationError) as e:
            raise RegistryError(
                f"malformed registry file: {e}",
                code=ErrorCodes.REGISTRY_READ_FAILED,
                context={"path": str(self.path)},
                cause=e,
            ) from e
        return entries

    async def _load(self) -> Dict[str, PersistedConnection]:
        # Caller holds self._lock.
        if self._entries is None:
            self._entries = await asyncio.to_thread(self._read)
            self.logger.debug("Registry loaded", path=str(self.path), entries=len(self._entries))
        return self._entries

    def _write(self, entries: Dict[str, PersistedConnection]) -> None:
        document = {
            "connections": {
                dsn: entry.model_dump(mode="json")
                for dsn, entry in entries.items()
            }
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                yaml.safe_dump(document, handle, default_flow_style=False, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    async def _persist(self, entries: Dict[str, PersistedConnection]) -> None:
        try:
            await asyncio.to_thread(self._write, entries)
        except OSError as e:
            raise RegistryError(
                f"write registry: {e}",
                code=ErrorCodes.REGISTRY_WRITE_FAILED,
                context={"path": str(self.path)},
                cause=e,
            ) from e

    async def add_connection(self, name: str, dsn: str) -> None:
        """Insert or overwrite the entry for ``dsn`` and stamp it with now.

        Raises:
            ValidationError: If ``name`` or ``dsn`` is empty
            RegistryError: If the file cannot be read or written; the
                in-memory state is left unchanged
        """
        ValidationUtils.require_fields(name=name, dsn=dsn)
        async with self._lock:
            entries = dict(await self._load())
            entries[dsn] = PersistedConnection(name=name, dsn=dsn, last_used_at=self._clock())
            await self._persist(entries)
            self._entries = entries
        self.logger.debug("Connection recorded", name=name, dsn=dsn)

    async def get_connections(self) -> List[PersistedConnection]:
        """Entries ordered by ``last_used_at`` descending, then name and DSN."""
        async with self._lock:
            entries = list((await self._load()).values())
        return sorted(entries, key=lambda entry: (-entry.last_used_at.timestamp(), entry.name, entry.dsn))

    async def remove_connection(self, dsn: str) -> bool:
        """Delete the entry for ``dsn``; return whether one existed."""
        async with self._lock:
            entries = dict(await self._load())
            if entries.pop(dsn, None) is None:
                return False
            await self._persist(entries)
            self._entries = entries
        self.logger.info("Connection removed", dsn=dsn)
        return True

    async def load(self) -> None:
        """Read the registry file into memory if it has not been read yet.

        Raises:
            RegistryError: If the file cannot be read or is malformed
        """
        async with self._lock:
            await self._load()

    @property
    def is_loaded(self) -> bool:
        return self._entries is not None

    def _cached(self) -> Dict[str, PersistedConnection]:
        return self._entries if self._entries is not None else {}

    def get(self, dsn: str) -> Optional[PersistedConnection]:
        """Cached entry for ``dsn``.

        The lookup never touches the file; a registry that has not been
        loaded, written or listed yet reports no entries.
        """
        return self._cached().get(dsn)

    def __contains__(self, dsn: object) -> bool:
        return dsn in self._cached()

    def __len__(self) -> int:
        return len(self._cached())

    def __repr__(self) -> str:
        return f"ConnectionRegistry(path={str(self.path)!r})"
