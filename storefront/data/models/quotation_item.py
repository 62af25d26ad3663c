from sqlalchemy import Column, Integer, String, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.data.models._columns import new_id


class QuotationItemModel(Base):
    __tablename__ = "quotation_items"

    id = Column(String(36), primary_key=True, default=new_id)
    quotation_id = Column(String(36), ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    quotation = relationship("QuotationModel", back_populates="items")
    product = relationship("ProductModel")
