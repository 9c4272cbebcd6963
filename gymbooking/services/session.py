from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from supabase import AsyncClient

from gymbooking.core.config import settings
from gymbooking.core.config_loader import load_gym_config
from gymbooking.core.events import SessionEvents
from gymbooking.core.logger import logger
from gymbooking.services.admin_service import AdminService
from gymbooking.services.auth_service import AuthService
from gymbooking.services.booking_service import BookingService
from gymbooking.services.db_service import DBService, create_client

@dataclass
class GymSession:
    """
    Everything one user session works with, built around a single client.
    Created once per session and passed explicitly to whoever needs it.
    """
    client: Any
    config: Dict[str, Any]
    events: SessionEvents = field(default_factory=SessionEvents)

    def __post_init__(self):
        self.db = DBService(self.client)
        self.auth = AuthService(
            self.client,
            self.events,
            site_url=settings.SITE_URL,
            account_fragment=self.config.get("account_fragment", "mi-cuenta"),
        )
        self.bookings = BookingService(self.db, self.auth, self.config)
        self.admin = AdminService(self.db, self.auth, self.config)

async def open_session(config: Optional[Dict[str, Any]] = None, access_token: Optional[str] = None,
                       refresh_token: Optional[str] = None, client: Optional[AsyncClient] = None) -> GymSession:
    """
    Opens a session, resuming the caller's tokens when given. A token that
    cannot be resumed leaves the session anonymous.
    """
    config = config or load_gym_config()
    client = client or await create_client()

    if access_token and refresh_token:
        try:
            await client.auth.set_session(access_token, refresh_token)
        except Exception as e:
            logger.warning(f"⚠️ Could not resume session, continuing anonymously: {e}")

    return GymSession(client=client, config=config)
