
from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, ForeignKey, Index, func, text
from app.database import Base

AddressTypes = ("Home", "Work", "Other")


class Address(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    phone = Column(String(10), nullable=False)
    address_line1 = Column(String(255), nullable=False)
    address_line2 = Column(String(255), nullable=True)
    landmark = Column(String(255), nullable=True)
    city = Column(String(80), nullable=False)
    state = Column(String(80), nullable=False)
    pincode = Column(String(6), nullable=False)
    country = Column(String(80), nullable=False, default="India")
    address_type = Column(Enum(*AddressTypes, name="address_type"), nullable=False, default="Home")
    is_default = Column(Boolean, nullable=False, default=False)
    is_deliverable = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        # at most one default address per user
        Index(
            "uq_addresses_user_default",
            "user_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )
