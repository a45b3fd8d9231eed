from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import authenticate_dev_stub, create_access_token
from ..database import get_db
from ..models.audit import AuditAction
from ..services.audit_logger import create_audit_event

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> LoginResponse:
    user = authenticate_dev_stub(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(user)
    create_audit_event(
        db,
        actor=str(user.id),
        action=AuditAction.LOGIN,
        entity_type="User",
        entity_id=str(user.id),
        details=None,
        request=request,
    )
    return LoginResponse(access_token=token, role=user.role.value)
