from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gymbooking.api.dependencies import get_session
from gymbooking.core.events import SessionSignal
from gymbooking.models.results import ServiceResult
from gymbooking.services.session import GymSession

router = APIRouter(prefix="/auth")

class InitializeRequest(BaseModel):
    # window.location.hash as the page sees it, e.g. "#access_token=..&type=recovery"
    fragment: Optional[str] = None
    page_url: Optional[str] = None

class CredentialsRequest(BaseModel):
    email: str
    password: str

class EmailRequest(BaseModel):
    email: str
    redirect_url: Optional[str] = None

class ChangePasswordRequest(BaseModel):
    new_password: str

class InitializeResponse(ServiceResult):
    signals: List[Dict[str, Any]] = []

@router.post("/initialize")
async def initialize(req: InitializeRequest, session: GymSession = Depends(get_session)):
    signals = []

    def collect(signal: SessionSignal, detail: Dict[str, Any]):
        signals.append({"type": signal.value, "detail": detail})

    unsubscribers = [session.events.subscribe(signal, collect) for signal in SessionSignal]
    try:
        result = await session.auth.initialize(req.fragment, req.page_url)
    finally:
        for unsubscribe in unsubscribers:
            unsubscribe()

    return InitializeResponse(**result.model_dump(), signals=signals)

@router.post("/signup")
async def signup(req: CredentialsRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.sign_up(req.email, req.password)

@router.post("/login")
async def login(req: CredentialsRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.sign_in(req.email, req.password)

@router.post("/magic-link")
async def magic_link(req: EmailRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.sign_in_with_magic_link(req.email, req.redirect_url)

@router.post("/password-reset")
async def password_reset(req: EmailRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.send_password_reset(req.email, req.redirect_url)

@router.post("/logout")
async def logout(session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.sign_out()

@router.post("/password")
async def change_password(req: ChangePasswordRequest, session: GymSession = Depends(get_session)) -> ServiceResult:
    return await session.auth.change_password(req.new_password)

@router.get("/me")
async def me(session: GymSession = Depends(get_session)):
    user = await session.auth.current_user()
    return {
        "user": user.model_dump() if user else None,
        "is_admin": await session.admin.is_admin() if user else False,
    }
