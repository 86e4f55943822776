
import random
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.auth import get_current_user
from app.database import get_db
from app.errors import ValidationError
from app.models.user import User
from app.schemas.address import AddressCreate, AddressUpdate, AddressResponse, PincodeCheckResponse
from app.schemas.common import MessageResponse
from app.services.address_service import AddressService

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


@router.get("/check-pincode/{pincode}", response_model=PincodeCheckResponse)
def check_pincode(pincode: str):
    if not (len(pincode) == 6 and pincode.isdigit()):
        raise ValidationError("Invalid pincode format")
    # no courier integration yet: every valid pincode is serviceable in 5-7 days
    days = random.randint(5, 7)
    return PincodeCheckResponse(
        serviceable=True,
        pincode=pincode,
        estimated_delivery_days=days,
        message=f"Delivery available in {days} days",
    )


@router.get("", response_model=List[AddressResponse])
def list_addresses(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AddressService.list_addresses(db, user.id)


@router.post("", response_model=AddressResponse, status_code=201)
def add_address(payload: AddressCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AddressService.add_address(db, user.id, payload)


@router.get("/{address_id}", response_model=AddressResponse)
def get_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AddressService.get_address(db, user.id, address_id)


@router.put("/{address_id}", response_model=AddressResponse)
def update_address(address_id: int, payload: AddressUpdate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AddressService.update_address(db, user.id, address_id, payload)


@router.delete("/{address_id}", response_model=MessageResponse)
def delete_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    AddressService.delete_address(db, user.id, address_id)
    return {"message": "Address removed"}


@router.put("/{address_id}/default", response_model=AddressResponse)
def set_default_address(address_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return AddressService.set_default(db, user.id, address_id)
