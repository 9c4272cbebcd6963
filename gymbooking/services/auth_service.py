from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from supabase import AsyncClient

from gymbooking.core.config import settings
from gymbooking.core.errors import BookingError, ErrorKind, classify_remote_error, recovered
from gymbooking.core.events import SessionEvents, SessionSignal
from gymbooking.core.logger import logger
from gymbooking.models.db_models import User
from gymbooking.models.results import AuthPayload, ServiceResult, SessionState, SessionTokens

def parse_fragment(fragment: Union[str, Mapping[str, str], None]) -> dict:
    """Accepts '#access_token=..&type=recovery', a full URL or an already parsed mapping."""
    if not fragment:
        return {}
    if isinstance(fragment, Mapping):
        return dict(fragment)
    if "#" in fragment:
        fragment = fragment.split("#", 1)[1]
    return dict(parse_qsl(fragment, keep_blank_values=False))

def to_user(raw: Any) -> Optional[User]:
    if raw is None:
        return None
    return User(id=str(raw.id), email=getattr(raw, "email", None))

def to_tokens(session: Any) -> Optional[SessionTokens]:
    if session is None:
        return None
    return SessionTokens(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
    )

def to_payload(response: Any) -> AuthPayload:
    """AuthResponse (user + session) -> AuthPayload."""
    session = getattr(response, "session", None)
    user = getattr(response, "user", None) or getattr(session, "user", None)
    return AuthPayload(user=to_user(user), session=to_tokens(session))

def session_payload(session: Any) -> AuthPayload:
    return AuthPayload(user=to_user(session.user), session=to_tokens(session))

class AuthService:
    """
    Sign-up, login (password and magic link), password recovery and session
    lookup against Supabase Auth. Signals for the page go through `events`.
    """

    def __init__(self, client: AsyncClient, events: Optional[SessionEvents] = None,
                 site_url: Optional[str] = None, account_fragment: str = "mi-cuenta"):
        self.client = client
        self.events = events or SessionEvents()
        self.site_url = site_url or settings.SITE_URL
        self.account_fragment = account_fragment

    def account_url(self, base_url: Optional[str] = None) -> str:
        """`<base>#mi-cuenta`, with any existing fragment/query dropped."""
        parts = urlsplit(base_url or self.site_url)
        return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", self.account_fragment))

    @recovered("initialize")
    async def initialize(self, fragment: Union[str, Mapping[str, str], None] = None,
                         page_url: Optional[str] = None) -> ServiceResult:
        """
        Establishes the session. Handles the callbacks Supabase appends to the
        redirect URL: recovery tokens are exchanged for a session and
        OPEN_PASSWORD_RESET is emitted; an error callback emits RECOVERY_ERROR.
        """
        params = parse_fragment(fragment)
        clean_url = None

        error = params.get("error")
        access_token = params.get("access_token")
        refresh_token = params.get("refresh_token")

        if error or access_token:
            # Tokens must not stay in the browser history
            clean_url = self.account_url(page_url)

        if error:
            description = params.get("error_description") or "El enlace de recuperación es inválido o ha expirado"
            logger.warning(f"⚠️ Recovery link error: {error} ({description})")
            self.events.emit(SessionSignal.RECOVERY_ERROR, error=error, error_description=description)
        elif params.get("type") == "recovery" and access_token and refresh_token:
            logger.info("🔑 Password recovery token detected")
            try:
                await self.client.auth.set_session(access_token, refresh_token)
            except Exception as e:
                reason = classify_remote_error(e).message
                logger.error(f"❌ Could not establish recovery session: {e}")
                self.events.emit(
                    SessionSignal.RECOVERY_ERROR,
                    error=reason or "Error al procesar el enlace de recuperación",
                    error_description="No se pudo establecer la sesión de recuperación",
                )
            else:
                logger.info("✅ Recovery session established")
                self.events.emit(SessionSignal.OPEN_PASSWORD_RESET)

        session = await self.current_session()
        payload = None
        if session is not None:
            payload = session_payload(session)
            logger.info(f"👤 Active session found: {payload.user.email if payload.user else '?'}")

        return ServiceResult.ok(SessionState(session=payload, clean_url=clean_url))

    @recovered("sign_up")
    async def sign_up(self, email: str, password: str) -> ServiceResult:
        response = await self.client.auth.sign_up({"email": email, "password": password})
        logger.info(f"🆕 Sign-up requested for {email}")
        return ServiceResult.ok(to_payload(response), "Registro exitoso. Verifica tu email.")

    @recovered("sign_in")
    async def sign_in(self, email: str, password: str) -> ServiceResult:
        response = await self.client.auth.sign_in_with_password({"email": email, "password": password})
        logger.info(f"✅ Login for {email}")
        return ServiceResult.ok(to_payload(response), "Login exitoso")

    @recovered("sign_in_with_magic_link")
    async def sign_in_with_magic_link(self, email: str, redirect_url: Optional[str] = None) -> ServiceResult:
        redirect_to = self.account_url(redirect_url)
        logger.info(f"✉️ Magic link for {email} (redirect: {redirect_to})")
        await self.client.auth.sign_in_with_otp({
            "email": email,
            "options": {"email_redirect_to": redirect_to},
        })
        return ServiceResult.ok(message="Revisa tu email para el enlace de acceso")

    @recovered("send_password_reset")
    async def send_password_reset(self, email: str, redirect_url: Optional[str] = None) -> ServiceResult:
        redirect_to = self.account_url(redirect_url)
        logger.info(f"✉️ Password reset for {email} (redirect: {redirect_to})")
        await self.client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        return ServiceResult.ok(message="Revisa tu email para el enlace de recuperación de contraseña")

    @recovered("sign_out")
    async def sign_out(self) -> ServiceResult:
        await self.client.auth.sign_out()
        return ServiceResult.ok(message="Sesión cerrada exitosamente")

    @recovered("change_password")
    async def change_password(self, new_password: str) -> ServiceResult:
        user = await self.current_user()
        if not user:
            raise BookingError(ErrorKind.UNAUTHENTICATED, "Debes estar autenticado para cambiar tu contraseña")

        response = await self.client.auth.update_user({"password": new_password})
        logger.info(f"🔒 Password changed for {user.email}")
        return ServiceResult.ok(AuthPayload(user=to_user(response.user)), "Contraseña actualizada exitosamente")

    async def current_user(self) -> Optional[User]:
        """Fresh user lookup; None on any failure."""
        try:
            response = await self.client.auth.get_user()
            if response is None:
                return None
            return to_user(response.user)
        except Exception as e:
            logger.warning(f"⚠️ Could not get current user: {e}")
            return None

    async def current_session(self):
        """Cached session held by the client; None on any failure."""
        try:
            return await self.client.auth.get_session()
        except Exception as e:
            logger.warning(f"⚠️ Could not get current session: {e}")
            return None

    def on_auth_state_change(self, callback: Callable[[str, Any], None]):
        return self.client.auth.on_auth_state_change(callback)
