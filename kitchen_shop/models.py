from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Money columns: GBP, two decimal places
Money = Numeric(10, 2)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)  # e.g. KOS-2025-123456
    revolut_order_id = Column(String, nullable=True, index=True)
    status = Column(String, nullable=False, default="pending", index=True)  # pending/authorised/paid/failed/cancelled

    customer_email = Column(String, nullable=False)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    customer_company = Column(String, nullable=True)

    billing_address_line1 = Column(String, nullable=False)
    billing_address_line2 = Column(String, nullable=True)
    billing_city = Column(String, nullable=False)
    billing_county = Column(String, nullable=True)
    billing_postcode = Column(String, nullable=False)
    billing_country = Column(String(2), nullable=False)

    # Shipping address mirrors billing until checkout collects a separate one
    shipping_address_line1 = Column(String, nullable=False)
    shipping_address_line2 = Column(String, nullable=True)
    shipping_city = Column(String, nullable=False)
    shipping_county = Column(String, nullable=True)
    shipping_postcode = Column(String, nullable=False)
    shipping_country = Column(String(2), nullable=False)

    vat_number = Column(String, nullable=True)
    vat_country = Column(String(2), nullable=True)

    subtotal = Column(Money, nullable=False, default=0)
    shipping_cost = Column(Money, nullable=False, default=0)
    tax_rate = Column(Numeric(5, 4), nullable=False, default=0)
    tax = Column(Money, nullable=False, default=0)
    total = Column(Money, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="GBP")
    is_vat_exempt = Column(Boolean, nullable=False, default=False)

    payment_method = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    variant_id = Column(String, nullable=False)
    variant_name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Money, nullable=False)
    line_total = Column(Money, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="items")


class ContactSubmission(Base):
    """Enquiry from the website contact form."""
    __tablename__ = "contact_submissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    company = Column(String, nullable=True)
    number_of_sites = Column(Integer, nullable=True)
    product_interest = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="new", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
