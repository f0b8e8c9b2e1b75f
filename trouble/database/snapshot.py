"""
Trouble - Snapshot Storage

Load/save/clear of the persisted session snapshot. Storage failures never
reach the game: they are logged and reported as "nothing stored".
"""

from __future__ import annotations

import logging

from pydantic import ValidationError
from supabase import Client

from trouble.config.settings import Settings
from trouble.database.models import GameSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Interface for snapshot storage backends."""

    def load(self) -> GameSnapshot | None:
        raise NotImplementedError

    def save(self, snapshot: GameSnapshot) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class SupabaseSnapshotStore(SnapshotStore):
    """Stores the snapshot as a JSON row in Supabase, keyed by name."""

    def __init__(self, client: Client, name: str, table: str = "game_snapshots") -> None:
        self.client = client
        self.name = name
        self.table = client.table(table)

    def load(self) -> GameSnapshot | None:
        """Fetch the stored snapshot, or None if absent or unreadable."""
        try:
            data = (
                self.table
                .select("state")
                .eq("name", self.name)
                .execute()
            )
            if data.data:
                return GameSnapshot.model_validate(data.data[0]["state"])
        except ValidationError:
            logger.exception("Stored snapshot %s is malformed", self.name)
        except Exception:
            logger.exception("Failed to load snapshot %s", self.name)
        return None

    def save(self, snapshot: GameSnapshot) -> None:
        """Insert or replace the stored snapshot."""
        try:
            (
                self.table
                .upsert({"name": self.name, "state": snapshot.model_dump(mode="json")})
                .execute()
            )
        except Exception:
            logger.exception("Failed to save snapshot %s", self.name)

    def clear(self) -> None:
        try:
            (
                self.table
                .delete()
                .eq("name", self.name)
                .execute()
            )
        except Exception:
            logger.exception("Failed to clear snapshot %s", self.name)


class InMemorySnapshotStore(SnapshotStore):
    """Process-local storage used when Supabase is not configured.

    Snapshots are kept serialized so a reload goes through the same
    validation as a database round trip.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self) -> GameSnapshot | None:
        raw = self._data.get("snapshot")
        if raw is None:
            return None
        try:
            return GameSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.exception("Stored snapshot is malformed")
            return None

    def save(self, snapshot: GameSnapshot) -> None:
        self._data["snapshot"] = snapshot.model_dump_json()

    def clear(self) -> None:
        self._data.pop("snapshot", None)


def create_snapshot_store(
    settings: Settings,
    client: Client | None = None,
) -> SnapshotStore:
    """Pick the storage backend for the given settings."""
    if client is None and settings.use_supabase:
        from trouble.database.client import get_supabase_client

        client = get_supabase_client()
    if client is not None:
        logger.info("Persisting snapshots to Supabase table %s", settings.snapshot_table)
        return SupabaseSnapshotStore(client, settings.snapshot_name, settings.snapshot_table)
    return InMemorySnapshotStore()
