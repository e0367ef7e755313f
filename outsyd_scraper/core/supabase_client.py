"""Supabase client for event storage, source registry and role lookups."""

from datetime import datetime, timezone
from typing import Any

from supabase import Client, create_client

from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.core.event_model import StoredEvent, UpsertOutcome
from outsyd_scraper.core.exceptions import MissingCredentialsError, SupabaseError
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)

EVENTS_TABLE = "events"
SOURCES_TABLE = "event_sources"
ROLES_TABLE = "user_roles"

# LIKE metacharacters in user input match literally
LIKE_ESCAPES = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_"})


class SupabaseClient:
    """Supabase client wrapper for the ingestion pipeline.

    Uses the service role key: it writes events, updates source bookkeeping
    and reads ``user_roles`` to authorize interactive scrape requests.
    """

    def __init__(self, client: Client | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

        if client is None:
            missing = [
                name
                for name, value in (
                    ("SUPABASE_URL", self.settings.supabase_url),
                    ("SUPABASE_SERVICE_ROLE_KEY", self.settings.supabase_service_role_key),
                )
                if not value
            ]
            if missing:
                raise MissingCredentialsError(missing)
            client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_service_role_key,
            )

        self._client = client
        self.logger = get_logger("supabase_client")

    @property
    def client(self) -> Client:
        """Get the Supabase client instance."""
        return self._client

    # ==========================================
    # Source Registry
    # ==========================================

    async def get_enabled_sources(self) -> list[dict[str, Any]]:
        """Rows of ``event_sources`` with enabled = true."""
        response = (
            self._client.table(SOURCES_TABLE)
            .select("name, url, country, category, domain, enabled")
            .eq("enabled", True)
            .execute()
        )
        return response.data or []

    async def mark_source_scraped(self, url: str, scraped_at: datetime) -> bool:
        """Record the last successful scrape of a source."""
        try:
            (
                self._client.table(SOURCES_TABLE)
                .update({"last_scraped_at": scraped_at.isoformat()})
                .eq("url", url)
                .execute()
            )
            return True
        except Exception as e:
            self.logger.warning("source_timestamp_update_failed", url=url, error=str(e))
            return False

    # ==========================================
    # Event Operations
    # ==========================================

    async def find_duplicate(self, event: StoredEvent) -> str | None:
        """Return the id of a stored event with the same (title, date, city, address)."""
        title, event_date, city, address = event.dedup_key
        response = (
            self._client.table(EVENTS_TABLE)
            .select("id")
            .eq("title", title)
            .eq("date", event_date)
            .eq("city", city)
            .eq("address", address)
            .limit(1)
            .execute()
        )
        if response.data:
            return response.data[0].get("id")
        return None

    async def insert_event(self, event: StoredEvent) -> dict[str, Any] | None:
        """Insert one event row.

        Returns:
            Inserted row, or None on failure (logged)
        """
        try:
            data = event.to_record(fallback_image_url=self.settings.fallback_image_url)
            response = self._client.table(EVENTS_TABLE).insert(data).execute()
            return response.data[0] if response.data else data
        except Exception as e:
            self.logger.error("event_insert_failed", title=event.title, error=str(e))
            return None

    async def save_event(self, event: StoredEvent, dry_run: bool = False) -> UpsertOutcome:
        """Insert an event unless its natural key is already stored.

        Existing rows are never updated, even when the new scrape is more
        complete.
        """
        try:
            existing_id = await self.find_duplicate(event)
        except Exception as e:
            self.logger.error("event_lookup_failed", title=event.title, error=str(e))
            return UpsertOutcome.INSERT_FAILED

        if existing_id:
            self.logger.info("event_duplicate_skipped", title=event.title, existing_id=existing_id)
            return UpsertOutcome.SKIPPED_DUPLICATE

        if dry_run:
            return UpsertOutcome.WOULD_INSERT

        if await self.insert_event(event) is None:
            return UpsertOutcome.INSERT_FAILED

        self.logger.info("event_inserted", title=event.title, date=event.date, city=event.city)
        return UpsertOutcome.INSERTED

    # ==========================================
    # Query Operations
    # ==========================================

    async def get_upcoming_events(
        self,
        country: str | None = None,
        city: str | None = None,
        category: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Get upcoming events, optionally filtered.

        Raises:
            SupabaseError: The query failed
        """
        query = (
            self._client.table(EVENTS_TABLE)
            .select("*")
            .gte("target_date", datetime.now(timezone.utc).date().isoformat())
            .order("target_date")
            .limit(limit)
        )

        if country:
            query = query.eq("country", country)
        if city:
            query = query.ilike("city", city.translate(LIKE_ESCAPES))
        if category:
            query = query.eq("category", category)

        try:
            response = query.execute()
        except Exception as e:
            raise SupabaseError(f"Event query failed: {e}", operation="select", table=EVENTS_TABLE) from e
        return response.data or []

    async def count_events(self) -> int | None:
        """Total rows in the events table."""
        response = self._client.table(EVENTS_TABLE).select("id", count="exact").limit(1).execute()
        return response.count

    # ==========================================
    # Auth
    # ==========================================

    async def get_user_id(self, access_token: str) -> str | None:
        """Resolve a session JWT to a user id (None if invalid/expired)."""
        try:
            response = self._client.auth.get_user(access_token)
        except Exception as e:
            self.logger.info("session_token_rejected", error=str(e))
            return None

        user = getattr(response, "user", None)
        return getattr(user, "id", None)

    async def has_role(self, user_id: str, role: str) -> bool:
        """Check ``user_roles`` for (user_id, role)."""
        response = (
            self._client.table(ROLES_TABLE)
            .select("role")
            .eq("user_id", user_id)
            .eq("role", role)
            .limit(1)
            .execute()
        )
        return bool(response.data)


# Singleton instance
_client: SupabaseClient | None = None


def get_supabase_client(settings: Settings | None = None) -> SupabaseClient:
    """Get or create Supabase client singleton.

    Raises:
        MissingCredentialsError: SUPABASE_URL or service role key not set
    """
    global _client
    if _client is None:
        _client = SupabaseClient(settings=settings)
    return _client
