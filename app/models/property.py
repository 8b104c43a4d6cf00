from enum import Enum
from sqlalchemy import Column, String, ForeignKey, DateTime, Float, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid

from app.db.base import Base, TimestampMixin


class UnitStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"


class Property(Base, TimestampMixin):
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    address = Column(String(500))
    description = Column(Text)

    # Relationships
    owner = relationship("User", back_populates="properties")
    units = relationship("Unit", back_populates="property", cascade="all, delete-orphan")


class Unit(Base, TimestampMixin):
    __tablename__ = "units"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id"), nullable=False, index=True)

    label = Column(String(100), nullable=False)
    target_price = Column(Float)
    status = Column(SQLEnum(UnitStatus), nullable=False, default=UnitStatus.AVAILABLE)
    # Non-null while an ACTIVE listing makes the unit publicly browsable
    listed_at = Column(DateTime, nullable=True)

    # Relationships
    property = relationship("Property", back_populates="units")
    listings = relationship("Listing", back_populates="unit", cascade="all, delete-orphan")
    leases = relationship("Lease", back_populates="unit")
