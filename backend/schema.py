from sqlalchemy import Column, Integer, String, Numeric, Float, ForeignKey, DateTime, UniqueConstraint
from base import Base

class Product(Base):
    __tablename__ = 'products'
    id = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    base_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    country = Column(String(50), nullable=False, index=True)


class ProductDiscount(Base):
    __tablename__ = 'product_discounts'
    # The unique constraint is the only guard against applying a discount twice.
    __table_args__ = (
        UniqueConstraint('product_id', 'discount_id', name='uq_product_discount'),
    )
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(50), ForeignKey('products.id'), nullable=False)
    discount_id = Column(String(50), nullable=False)
    percent = Column(Float, nullable=False)
    applied_at = Column(DateTime)
