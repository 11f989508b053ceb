# cardapio/models.py

# SQLAlchemy ORM models for the tenant record store.
# store_config is the tenant root; hours, catalog and delivery zones hang off it
# and are removed with it. client_storage is a small key/value area holding
# cart snapshots and remembered customer data.


from __future__ import annotations
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    JSON, Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cardapio.db import Base


class StoreConfig(Base):
    __tablename__ = "store_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subdomain: Mapped[str] = mapped_column(String(63), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="Minha Loja")
    admin_email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    whatsapp: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)  # manual toggle
    auto_schedule_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    minimum_order: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    pix_key: Mapped[str | None] = mapped_column(String(140), nullable=True)
    pix_key_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # cpf|cnpj|email|phone|random
    table_mode_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    table_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    business_hours: Mapped[list[BusinessHour]] = relationship(
        back_populates="store", cascade="all, delete-orphan", order_by="BusinessHour.day_of_week"
    )
    categories: Mapped[list[Category]] = relationship(cascade="all, delete-orphan")
    products: Mapped[list[Product]] = relationship(cascade="all, delete-orphan")
    delivery_zones: Mapped[list[DeliveryZone]] = relationship(cascade="all, delete-orphan")


class BusinessHour(Base):
    __tablename__ = "business_hours"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store_config.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=Sun..6=Sat
    is_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    store: Mapped[StoreConfig] = relationship(back_populates="business_hours")
    periods: Mapped[list[BusinessHourPeriod]] = relationship(
        back_populates="business_hour", cascade="all, delete-orphan", order_by="BusinessHourPeriod.sort_order"
    )

    __table_args__ = (
        UniqueConstraint("store_id", "day_of_week", name="uq_hours_store_day"),
    )


class BusinessHourPeriod(Base):
    __tablename__ = "business_hour_periods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_hour_id: Mapped[int] = mapped_column(
        ForeignKey("business_hours.id", ondelete="CASCADE"), index=True, nullable=False
    )
    open_time: Mapped[str] = mapped_column(String(8), nullable=False)  # "HH:MM[:SS]"
    close_time: Mapped[str] = mapped_column(String(8), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    business_hour: Mapped[BusinessHour] = relationship(back_populates="periods")


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store_config.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store_config.id", ondelete="CASCADE"), nullable=False)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"))
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    allows_half_half: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped[Category | None] = relationship()
    option_groups: Mapped[list[ProductOptionGroup]] = relationship(
        back_populates="product", cascade="all, delete-orphan", order_by="ProductOptionGroup.sort_order"
    )

    __table_args__ = (
        Index("idx_products_store_category", "store_id", "category_id"),
    )


class ProductOptionGroup(Base):
    __tablename__ = "product_option_groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_select: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    product: Mapped[Product] = relationship(back_populates="option_groups")
    options: Mapped[list[ProductOption]] = relationship(
        back_populates="group", cascade="all, delete-orphan", order_by="ProductOption.sort_order"
    )


class ProductOption(Base):
    __tablename__ = "product_options"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("product_option_groups.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    group: Mapped[ProductOptionGroup] = relationship(back_populates="options")


class DeliveryZone(Base):
    __tablename__ = "delivery_zones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("store_config.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ClientStorage(Base):
    __tablename__ = "client_storage"

    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    storage_key: Mapped[str] = mapped_column(String(200), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
