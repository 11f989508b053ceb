# cardapio/ingest.py

# Seeding script to load tenant data from CSV into the record store.
# Reads and normalizes stores, business hours, products, product options and
# delivery zones CSVs (rows are tied to their tenant by the `subdomain` column).
# Tenants present in the CSVs are replaced as a whole; other tenants are untouched.
# Automatically detects CSV files if env vars are missing.
#
#   python -m cardapio.ingest

from __future__ import annotations

import asyncio
import os
from typing import Iterable, Optional

import pandas as pd
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.config import settings
from cardapio.db import SessionLocal, engine, init_models
from cardapio.logger import setup_logger
from cardapio.models import (
    BusinessHour, BusinessHourPeriod, Category, DeliveryZone, Product, ProductOption, ProductOptionGroup,
    StoreConfig,
)
from cardapio.utils.money import to_money

logger = setup_logger(__name__)

KINDS = ("stores", "hours", "products", "options", "zones")


# ---------- helpers ----------

def _read_csv(path: str) -> pd.DataFrame:
    if not os.path.exists(path):
        raise FileNotFoundError(f"CSV not found: {path}")
    return _norm_columns(pd.read_csv(path, dtype=str, keep_default_na=False))


def _norm_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [c.strip().lower() for c in df.columns]
    if "dayofweek" in df.columns:
        df.rename(columns={"dayofweek": "day_of_week"}, inplace=True)
    return df


def _blank(val) -> bool:
    return val is None or (isinstance(val, float) and pd.isna(val)) or str(val).strip() == ""


def _text(val, default: Optional[str] = None) -> Optional[str]:
    return default if _blank(val) else str(val).strip()


def _flag(val, default: bool = False) -> bool:
    if _blank(val):
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "sim", "s", "y"}


def _int(val, default: int = 0) -> int:
    return default if _blank(val) else int(float(str(val).strip()))


def _ensure_time_str(x) -> str:
    """Return HH:MM string from 'H:M'/'H:M:S'/'HHMM'."""
    s = str(x).strip()
    if s.isdigit() and len(s) in (3, 4):
        s = f"{s[:-2]}:{s[-2:]}"
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return pd.to_datetime(s, format=fmt).strftime("%H:%M")
        except ValueError:
            continue
    raise ValueError(f"Invalid time value: {x!r}")


def _rows(df: Optional[pd.DataFrame], subdomain: str) -> list[dict]:
    if df is None or df.empty:
        return []
    return df[df["subdomain"].str.strip() == subdomain].to_dict(orient="records")


# ---------- frames -> ORM ----------

def _build_hours(rows: list[dict]) -> list[BusinessHour]:
    days: dict[int, BusinessHour] = {}
    for row in rows:
        day = _int(row.get("day_of_week"))
        if not 0 <= day <= 6:
            raise ValueError(f"day_of_week must be 0 (Sunday) .. 6 (Saturday), got {day}")
        hour = days.get(day)
        if hour is None:
            hour = days[day] = BusinessHour(day_of_week=day, is_open=False, periods=[])
        hour.is_open = hour.is_open or _flag(row.get("is_open"), default=True)
        if not _blank(row.get("open_time")) and not _blank(row.get("close_time")):
            hour.periods.append(BusinessHourPeriod(
                open_time=_ensure_time_str(row["open_time"]),
                close_time=_ensure_time_str(row["close_time"]),
                sort_order=len(hour.periods),
            ))
    return [days[d] for d in sorted(days)]


def _build_catalog(product_rows: list[dict], option_rows: list[dict]) -> tuple[list[Category], list[Product]]:
    categories: dict[str, Category] = {}
    products: dict[str, Product] = {}
    for i, row in enumerate(product_rows):
        category = None
        cat_name = _text(row.get("category"))
        if cat_name:
            category = categories.get(cat_name)
            if category is None:
                category = categories[cat_name] = Category(name=cat_name, sort_order=len(categories))
        name = _text(row.get("name"))
        if not name:
            raise ValueError("products CSV rows need a 'name'")
        products[name] = Product(
            name=name,
            description=_text(row.get("description")),
            price=to_money(_text(row.get("price"), "0")),
            image_url=_text(row.get("image_url")),
            is_available=_flag(row.get("is_available"), default=True),
            allows_half_half=_flag(row.get("allows_half_half")),
            sort_order=_int(row.get("sort_order"), default=i),
            category=category,
            option_groups=[],
        )

    groups: dict[tuple[str, str], ProductOptionGroup] = {}
    for row in option_rows:
        product = products.get(_text(row.get("product"), ""))
        if product is None:
            raise ValueError(f"options CSV references unknown product {row.get('product')!r}")
        title = _text(row.get("group"), "Opções")
        group = groups.get((product.name, title))
        if group is None:
            group = groups[(product.name, title)] = ProductOptionGroup(
                title=title,
                is_required=_flag(row.get("is_required")),
                max_select=max(1, _int(row.get("max_select"), default=1)),
                sort_order=len(product.option_groups),
                options=[],
            )
            product.option_groups.append(group)
        group.options.append(ProductOption(
            name=_text(row.get("option"), ""),
            price=to_money(_text(row.get("price"), "0")),
            sort_order=len(group.options),
        ))
    return list(categories.values()), list(products.values())


def build_stores(frames: dict[str, Optional[pd.DataFrame]]) -> list[StoreConfig]:
    """Turn the normalized CSV frames into transient StoreConfig trees."""
    stores = []
    for row in frames["stores"].to_dict(orient="records"):
        subdomain = _text(row.get("subdomain"))
        if not subdomain:
            raise ValueError("stores CSV rows need a 'subdomain'")
        categories, products = _build_catalog(
            _rows(frames.get("products"), subdomain),
            _rows(frames.get("options"), subdomain),
        )
        store = StoreConfig(
            subdomain=subdomain,
            name=_text(row.get("name"), "Minha Loja"),
            admin_email=_text(row.get("admin_email"), ""),
            whatsapp=_text(row.get("whatsapp"), ""),
            address=_text(row.get("address")),
            is_open=_flag(row.get("is_open")),
            auto_schedule_enabled=_flag(row.get("auto_schedule_enabled")),
            minimum_order=to_money(_text(row.get("minimum_order"), "0")),
            pix_key=_text(row.get("pix_key")),
            pix_key_type=_text(row.get("pix_key_type")),
            table_mode_enabled=_flag(row.get("table_mode_enabled")),
            table_count=_int(row.get("table_count")),
            business_hours=_build_hours(_rows(frames.get("hours"), subdomain)),
            categories=categories,
            products=products,
            delivery_zones=[
                DeliveryZone(
                    name=_text(z.get("name"), ""),
                    price=to_money(_text(z.get("price"), "0")),
                    is_active=_flag(z.get("is_active"), default=True),
                )
                for z in _rows(frames.get("zones"), subdomain)
            ],
        )
        stores.append(store)
    return stores


async def _drop_stores(session: AsyncSession, subdomains: list[str]) -> None:
    ids = (await session.execute(
        select(StoreConfig.id).where(StoreConfig.subdomain.in_(subdomains))
    )).scalars().all()
    if not ids:
        return
    product_ids = select(Product.id).where(Product.store_id.in_(ids))
    group_ids = select(ProductOptionGroup.id).where(ProductOptionGroup.product_id.in_(product_ids))
    hour_ids = select(BusinessHour.id).where(BusinessHour.store_id.in_(ids))

    for stmt in (
        delete(ProductOption).where(ProductOption.group_id.in_(group_ids)),
        delete(ProductOptionGroup).where(ProductOptionGroup.product_id.in_(product_ids)),
        delete(Product).where(Product.store_id.in_(ids)),
        delete(Category).where(Category.store_id.in_(ids)),
        delete(BusinessHourPeriod).where(BusinessHourPeriod.business_hour_id.in_(hour_ids)),
        delete(BusinessHour).where(BusinessHour.store_id.in_(ids)),
        delete(DeliveryZone).where(DeliveryZone.store_id.in_(ids)),
        delete(StoreConfig).where(StoreConfig.id.in_(ids)),
    ):
        await session.execute(stmt, execution_options={"synchronize_session": False})
    # rows loaded earlier in this session are gone from the database
    session.expunge_all()


# ---------- public entrypoint ----------

async def load_frames(session: AsyncSession, frames: dict[str, Optional[pd.DataFrame]]) -> int:
    stores = build_stores(frames)
    await _drop_stores(session, [s.subdomain for s in stores])
    session.add_all(stores)
    await session.commit()
    for s in stores:
        logger.info(
            f"Seeded {s.subdomain}: {len(s.business_hours)} day(s), {len(s.products)} product(s), "
            f"{len(s.delivery_zones)} zone(s)"
        )
    return len(stores)


async def ingest(paths: dict[str, Optional[str]]) -> int:
    await init_models(engine)
    frames = {kind: _read_csv(path) if path else None for kind, path in paths.items()}
    async with SessionLocal() as session:
        n = await load_frames(session, frames)
    logger.info(f"Ingest complete. Stores => {n}")
    return n


def _auto_find(csvs: Iterable[str]) -> dict[str, Optional[str]]:
    """
    If env vars are not set, try to resolve the CSVs by common names in cwd.
    """
    found: dict[str, Optional[str]] = {kind: None for kind in KINDS}
    for path in csvs:
        low = os.path.basename(path).lower()
        if "option" in low:
            found["options"] = path
        elif "product" in low or "menu" in low:
            found["products"] = path
        elif "hour" in low:
            found["hours"] = path
        elif "zone" in low or "bairro" in low:
            found["zones"] = path
        elif "store" in low or "loja" in low:
            found["stores"] = path
    return found  # may contain None values


if __name__ == "__main__":
    # Prefer env vars; else try to locate CSVs in current folder.
    paths = {
        "stores": settings.STORES_CSV,
        "hours": settings.HOURS_CSV,
        "products": settings.PRODUCTS_CSV,
        "options": settings.OPTIONS_CSV,
        "zones": settings.ZONES_CSV,
    }
    if not all(paths.values()):
        cwd_csvs = [os.path.join(os.getcwd(), f) for f in os.listdir(os.getcwd()) if f.lower().endswith(".csv")]
        guess = _auto_find(cwd_csvs)
        paths = {kind: paths[kind] or guess[kind] for kind in KINDS}

    if not paths["stores"]:
        raise SystemExit(
            "Set CSV paths via .env (STORES_CSV, HOURS_CSV, PRODUCTS_CSV, OPTIONS_CSV, ZONES_CSV) or place "
            "the CSVs in this folder with recognizable names (stores / hours / products / options / zones)."
        )

    logger.info("Using:\n" + "\n".join(f"  {kind}: {path}" for kind, path in paths.items()))
    asyncio.run(ingest(paths))
