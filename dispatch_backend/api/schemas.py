from typing import Optional

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


# Required-field checks live in the service so they surface as 400s, not 422s.
class CreateAmbulanceRequest(StrictModel):
    pickup_address: Optional[str] = None
    destination_address: Optional[str] = None
    emergency_type: Optional[str] = None
    customer_condition: Optional[str] = None
    contact_number: Optional[str] = None
    priority: Optional[str] = None


class UpdateAmbulanceRequest(StrictModel):
    status: Optional[str] = None
    assigned_staff_id: Optional[int] = None
    notes: Optional[str] = None


class UpdateAmbulanceStatusRequest(StrictModel):
    status: Optional[str] = None
    notes: Optional[str] = None


class ForwardToHospitalRequest(StrictModel):
    hospital_user_id: Optional[int] = None


class HospitalResponseRequest(StrictModel):
    response: Optional[str] = None
    notes: Optional[str] = None
