"""
Trouble Persistence Layer.

Snapshot models and storage backends (Supabase or in-memory).
"""

from trouble.database.client import get_supabase_client
from trouble.database.models import (
    DieStateRecord,
    GameSnapshot,
    PegRecord,
    PlayerRecord,
    TurnRecord,
)
from trouble.database.snapshot import (
    InMemorySnapshotStore,
    SnapshotStore,
    SupabaseSnapshotStore,
    create_snapshot_store,
)

__all__ = [
    "get_supabase_client",
    "create_snapshot_store",
    "DieStateRecord",
    "GameSnapshot",
    "InMemorySnapshotStore",
    "PegRecord",
    "PlayerRecord",
    "SnapshotStore",
    "SupabaseSnapshotStore",
    "TurnRecord",
]
