from sqlalchemy import Column, String, DateTime, Numeric, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.data.models._columns import new_id, utcnow
from storefront.domain.status import QuotationStatus


class QuotationModel(Base):
    __tablename__ = "quotations"

    id = Column(String(36), primary_key=True, default=new_id)
    quotation_number = Column(String(40), nullable=False, unique=True)
    user_id = Column(String(36), nullable=False, index=True)

    status = Column(
        Enum(QuotationStatus, name="quotation_status", native_enum=False, length=20),
        nullable=False,
        default=QuotationStatus.PENDING,
    )
    total = Column(Numeric(12, 2), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)
    customer_notes = Column(Text, nullable=True)

    # ustawiane przy konwersji na zamowienie
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "QuotationItemModel",
        back_populates="quotation",
        cascade="all, delete-orphan",
    )
