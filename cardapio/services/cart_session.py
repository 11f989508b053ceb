# cardapio/services/cart_session.py

# Durable cart snapshots and the command runner around CartStore.
# Every mutation is a command: capture the pre-state, apply it in memory, write
# the snapshot, and either keep the change or restore the pre-state. Storage
# failures never reach the caller; they roll back and leave a transient notice.
# Loads are best-effort too: an unreadable snapshot yields an empty cart.

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, Sequence, TypeVar

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardapio.config import settings
from cardapio.logger import setup_logger
from cardapio.models import ClientStorage
from cardapio.schemas import CartState, CustomerInfo, DeliverySelection
from cardapio.services.cart import CartStore

logger = setup_logger(__name__)

T = TypeVar("T")

SAVE_FAILED_NOTICE = "Não foi possível salvar o carrinho. Tente novamente."


class CartStorage(Protocol):
    async def load(self, namespace: str, key: str) -> Optional[dict]: ...

    async def save(self, namespace: str, key: str, payload: dict) -> None: ...


class SqlCartStorage:
    """client_storage rows as a namespaced key/value store."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load(self, namespace: str, key: str) -> Optional[dict]:
        row = await self.session.get(ClientStorage, (namespace, key))
        return dict(row.payload) if row else None

    async def save(self, namespace: str, key: str, payload: dict) -> None:
        try:
            row = await self.session.get(ClientStorage, (namespace, key))
            if row is None:
                self.session.add(ClientStorage(namespace=namespace, storage_key=key, payload=payload))
            else:
                row.payload = payload
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise


@dataclass
class CommandResult(Generic[T]):
    value: T
    notice: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.notice is None


class CartSession:
    """A CartStore bound to its storage slot for one client session."""

    def __init__(self, store: CartStore, storage: CartStorage, key: str, namespace: Optional[str] = None):
        self.store = store
        self.storage = storage
        self.key = key
        self.namespace = namespace or settings.CART_NAMESPACE

    @classmethod
    async def open(cls, storage: CartStorage, key: str, namespace: Optional[str] = None) -> CartSession:
        namespace = namespace or settings.CART_NAMESPACE
        state = None
        try:
            payload = await storage.load(namespace, key)
            if payload:
                state = CartState.model_validate(payload)
        except (SQLAlchemyError, ValidationError, OSError) as e:
            logger.warning(f"Cart snapshot {namespace}/{key} unreadable, starting empty: {e}")
        return cls(CartStore(state), storage, key, namespace)

    async def persist(self) -> bool:
        try:
            await self.storage.save(self.namespace, self.key, self.store.snapshot().model_dump(mode="json"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"Cart snapshot {self.namespace}/{self.key} not saved: {e}")
            return False

    async def run(self, action: Callable[[CartStore], T]) -> CommandResult[T]:
        before = self.store.snapshot()
        value = action(self.store)
        if await self.persist():
            return CommandResult(value)

        self.store.restore(before)
        logger.warning(f"Cart {self.key} rolled back to its previous state")
        return CommandResult(value, notice=SAVE_FAILED_NOTICE)


# ---------- remembered customer ----------

async def load_customer(storage: CartStorage, key: str) -> dict:
    try:
        return await storage.load(settings.CUSTOMER_NAMESPACE, key) or {}
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Customer cache {key} unreadable: {e}")
        return {}


async def remember_customer(storage: CartStorage, key: str, customer: CustomerInfo,
                            delivery: DeliverySelection) -> None:
    current = await load_customer(storage, key)
    current.update({
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "complement": customer.complement,
        "delivery_zone_id": delivery.zone_id,
    })
    try:
        await storage.save(settings.CUSTOMER_NAMESPACE, key, current)
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Customer cache {key} not saved: {e}")


def prefill_customer(store: CartStore, cached: dict, zones: Sequence = ()) -> bool:
    """Copy remembered customer data into an empty, untouched cart context.

    The remembered zone is only reused while it is still offered in `zones`.
    """
    if not cached or not store.is_empty or store.customer.name:
        return False
    store.set_customer(
        name=cached.get("name") or None,
        phone=cached.get("phone") or None,
        address=cached.get("address") or None,
        complement=cached.get("complement") or None,
    )
    zone = next((z for z in zones if z.id == cached.get("delivery_zone_id")), None)
    if zone is not None and store.delivery.zone_id is None:
        store.set_delivery(store.delivery.model_copy(update={
            "zone_id": zone.id,
            "zone_name": zone.name,
            "zone_price": zone.price,
        }))
    return True
