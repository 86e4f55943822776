
from typing import List
from sqlalchemy.orm import Session
from app.errors import NotFoundError, ForbiddenError
from app.models.address import Address
from app.schemas.address import AddressCreate, AddressUpdate


class AddressService:
    """Address book; keeps at most one default address per user"""

    @staticmethod
    def _clear_default(db: Session, user_id: int, keep_id=None) -> None:
        q = db.query(Address).filter(Address.user_id == user_id, Address.is_default == True)
        if keep_id is not None:
            q = q.filter(Address.id != keep_id)
        q.update({Address.is_default: False}, synchronize_session=False)

    @staticmethod
    def list_addresses(db: Session, user_id: int) -> List[Address]:
        return (
            db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
            .all()
        )

    @staticmethod
    def get_address(db: Session, user_id: int, address_id: int) -> Address:
        address = db.query(Address).filter(Address.id == address_id).first()
        if not address:
            raise NotFoundError("Address")
        if address.user_id != user_id:
            raise ForbiddenError()
        return address

    @staticmethod
    def add_address(db: Session, user_id: int, data: AddressCreate) -> Address:
        if data.is_default:
            AddressService._clear_default(db, user_id)
        address = Address(user_id=user_id, **data.model_dump())
        db.add(address)
        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def update_address(db: Session, user_id: int, address_id: int, data: AddressUpdate) -> Address:
        address = AddressService.get_address(db, user_id, address_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("is_default"):
            AddressService._clear_default(db, user_id, keep_id=address.id)
        for key, value in changes.items():
            setattr(address, key, value)
        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def set_default(db: Session, user_id: int, address_id: int) -> Address:
        address = AddressService.get_address(db, user_id, address_id)
        AddressService._clear_default(db, user_id, keep_id=address.id)
        address.is_default = True
        db.commit()
        db.refresh(address)
        return address

    @staticmethod
    def delete_address(db: Session, user_id: int, address_id: int) -> None:
        address = AddressService.get_address(db, user_id, address_id)
        db.delete(address)
        db.commit()
