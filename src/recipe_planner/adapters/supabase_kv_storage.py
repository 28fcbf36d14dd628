"""Supabase-backed key-value storage for cache snapshots."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from recipe_planner.services.cache import KeyValueStorage


@dataclass
class SupabaseKeyValueStorage(KeyValueStorage):
    """Stores string values in a ``key``/``value`` table."""

    client: Client
    table_name: str = "kv_store"

    def load(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        response = (
            self.client.table(self.table_name)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        value = response.data[0].get("value")
        return value if isinstance(value, str) else None

    def save(self, key: str, value: str) -> None:
        """Insert or replace the value stored under a key."""
        response = (
            self.client.table(self.table_name)
            .upsert(
                {
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="key",
            )
            .execute()
        )
        if response.data is None:
            raise RuntimeError(f"Failed to save {key!r} to Supabase")
