import functools
from enum import Enum
from typing import Optional

import httpx
from supabase import AuthError, PostgrestAPIError

from gymbooking.core.logger import logger


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_AUTHORIZED = "not_authorized"
    SLOT_UNAVAILABLE = "slot_unavailable"
    SLOT_ALREADY_BOOKED = "slot_already_booked"
    TRIAL_ALREADY_USED = "trial_already_used"
    NOT_FOUND_OR_FORBIDDEN = "not_found_or_forbidden"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    PERMISSION_DENIED = "permission_denied"
    CONFIGURATION_MISSING = "configuration_missing"
    AUTH_FAILED = "auth_failed"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# Default user-facing messages (shown as-is by the widget)
DEFAULT_MESSAGES = {
    ErrorKind.UNAUTHENTICATED: "Debes iniciar sesión",
    ErrorKind.NOT_AUTHORIZED: "No autorizado",
    ErrorKind.SLOT_UNAVAILABLE: "El slot seleccionado no está disponible",
    ErrorKind.SLOT_ALREADY_BOOKED: "Este horario ya está reservado",
    ErrorKind.TRIAL_ALREADY_USED: "Ya has utilizado tu clase de prueba gratuita. ¡Contáctanos para conocer nuestros planes!",
    ErrorKind.NOT_FOUND_OR_FORBIDDEN: "Reserva no encontrada o no autorizada",
    ErrorKind.REMOTE_UNAVAILABLE: "No se pudo conectar con el servidor de reservas. Revisa tu conexión e inténtalo de nuevo.",
    ErrorKind.PERMISSION_DENIED: "Permiso denegado por las políticas de seguridad de la base de datos",
    ErrorKind.CONFIGURATION_MISSING: "El sistema de reservas no está configurado. Contacta al administrador.",
    ErrorKind.AUTH_FAILED: "Error de autenticación",
    ErrorKind.INVALID_INPUT: "Datos inválidos",
    ErrorKind.TIMEOUT: "Timeout: La consulta tardó demasiado",
    ErrorKind.UNKNOWN: "Ocurrió un error inesperado",
}

# PostgREST / Postgres error codes
PERMISSION_CODES = {"42501", "PGRST301", "PGRST302"}
MISSING_TABLE_CODES = {"42P01", "PGRST205"}
UNIQUE_VIOLATION = "23505"


class BookingError(Exception):
    """Failure of a facade operation, carrying a kind and a user-facing message."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        super().__init__(self.message)


def classify_remote_error(exc: Exception, resource: str = "") -> BookingError:
    """
    Maps a transport, PostgREST or auth exception to a BookingError.
    Unique violations map to SLOT_ALREADY_BOOKED: the only unique index a
    write can hit from this facade guards confirmed bookings per slot.
    """
    if isinstance(exc, BookingError):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return BookingError(ErrorKind.TIMEOUT)

    if isinstance(exc, httpx.TransportError):
        return BookingError(ErrorKind.REMOTE_UNAVAILABLE)

    if isinstance(exc, PostgrestAPIError):
        code = str(exc.code or "")
        if code in PERMISSION_CODES:
            return BookingError(ErrorKind.PERMISSION_DENIED)
        if code in MISSING_TABLE_CODES:
            table = f" (falta la tabla '{resource}')" if resource else ""
            return BookingError(
                ErrorKind.CONFIGURATION_MISSING,
                f"La base de datos no está configurada{table}. Ejecuta supabase/schema.sql.",
            )
        if code == UNIQUE_VIOLATION:
            return BookingError(ErrorKind.SLOT_ALREADY_BOOKED)
        return BookingError(ErrorKind.UNKNOWN, exc.message or str(exc))

    if isinstance(exc, AuthError):
        return BookingError(ErrorKind.AUTH_FAILED, exc.message or str(exc))

    return BookingError(ErrorKind.UNKNOWN, str(exc) or None)


def recovered(operation: str):
    """
    Decorator for public async operations: every failure is logged and
    turned into a failed ServiceResult instead of propagating.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            # Imported lazily, results depend on this module
            from gymbooking.models.results import ServiceResult

            try:
                return await func(*args, **kwargs)
            except BookingError as e:
                logger.warning(f"⚠️ {operation} failed [{e.kind.value}]: {e.message}")
                return ServiceResult.fail(e)
            except Exception as e:
                error = classify_remote_error(e)
                if error.kind == ErrorKind.UNKNOWN:
                    logger.exception(f"❌ Unexpected error in {operation}: {e}")
                else:
                    logger.error(f"❌ {operation} failed [{error.kind.value}]: {e}")
                return ServiceResult.fail(error)
        return wrapper
    return decorator
