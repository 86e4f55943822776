from pydantic import BaseModel, Field, ConfigDict
from typing import Literal, Optional


AddressType = Literal["Home", "Work", "Other"]


class AddressCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    landmark: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., pattern=r"^[0-9]{6}$")
    country: str = "India"
    address_type: AddressType = "Home"
    is_default: bool = False


class AddressUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, pattern=r"^[0-9]{10}$")
    address_line1: Optional[str] = Field(None, min_length=1)
    address_line2: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=1)
    pincode: Optional[str] = Field(None, pattern=r"^[0-9]{6}$")
    country: Optional[str] = None
    address_type: Optional[AddressType] = None
    is_default: Optional[bool] = None


class AddressResponse(BaseModel):
    id: int
    name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    landmark: Optional[str] = None
    city: str
    state: str
    pincode: str
    country: str
    address_type: str
    is_default: bool
    is_deliverable: bool

    model_config = ConfigDict(from_attributes=True)


class PincodeCheckResponse(BaseModel):
    serviceable: bool
    pincode: str
    estimated_delivery_days: int
    message: str
