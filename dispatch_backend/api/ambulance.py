from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..auth import Actor, get_current_actor
from ..database import get_db
from ..services.ambulance_queries import view_to_dict
from ..services.ambulance_service import AmbulanceService
from .schemas import (
    CreateAmbulanceRequest,
    ForwardToHospitalRequest,
    HospitalResponseRequest,
    UpdateAmbulanceRequest,
    UpdateAmbulanceStatusRequest,
)

router = APIRouter(prefix="/ambulance", tags=["ambulance"])


def _listing(views) -> dict:
    items = [view_to_dict(view) for view in views]
    return {"count": len(items), "items": items}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ambulance_request(
    payload: CreateAmbulanceRequest,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    request_id = AmbulanceService(db, request).create_request(actor, **payload.model_dump())
    return {"message": "Ambulance request created successfully", "request_id": request_id}


@router.get("")
def list_ambulance_requests(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    listing = AmbulanceService(db).list_requests(actor, unread_only=unread_only)
    response = _listing(listing.items)
    response["column_set"] = listing.column_set.value
    return response


@router.get("/customer")
def list_customer_ambulance_requests(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return _listing(AmbulanceService(db).list_customer_requests(actor))


@router.get("/hospital/forwarded")
def list_hospital_forwarded_requests(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return _listing(AmbulanceService(db).list_forwarded_requests(actor))


@router.get("/hospitals/{state}")
def list_hospitals_by_region(
    state: str,
    district: str | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return _listing(AmbulanceService(db).list_hospitals_by_region(actor, state, district))


@router.put("/{request_id}")
def update_ambulance_request(
    request_id: int,
    payload: UpdateAmbulanceRequest,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    AmbulanceService(db, request).update_request(
        actor,
        request_id,
        status=payload.status,
        assigned_staff_id=payload.assigned_staff_id,
        notes=payload.notes,
    )
    return {"message": "Ambulance request updated successfully"}


@router.post("/{request_id}/assign")
def assign_ambulance_request(
    request_id: int,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    AmbulanceService(db, request).assign_to_self(actor, request_id)
    return {"message": "Ambulance request assigned successfully"}


@router.put("/{request_id}/status")
def update_ambulance_status(
    request_id: int,
    payload: UpdateAmbulanceStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    AmbulanceService(db, request).update_status(
        actor, request_id, status=payload.status, notes=payload.notes
    )
    return {"message": "Ambulance request status updated successfully"}


@router.post("/{request_id}/forward")
def forward_to_hospital(
    request_id: int,
    payload: ForwardToHospitalRequest,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    AmbulanceService(db, request).forward_to_hospital(actor, request_id, payload.hospital_user_id)
    return {"message": "Request forwarded to hospital successfully"}


@router.post("/{request_id}/read")
def mark_ambulance_as_read(
    request_id: int,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    AmbulanceService(db, request).mark_as_read(actor, request_id)
    return {"message": "Request marked as read"}


@router.post("/{request_id}/hospital-response")
def hospital_response(
    request_id: int,
    payload: HospitalResponseRequest,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    decision = AmbulanceService(db, request).hospital_respond(
        actor, request_id, response=payload.response, notes=payload.notes
    )
    return {"message": f"Request {decision.value} successfully"}
