import logging
from decimal import Decimal
from typing import List

from sqlalchemy import delete as sa_delete, select, text, update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from cart_service.errors import CartConflictError, PersistenceError
from cart_service.store.cart_models import Cart, CartItem
from cart_service.store.cart_orm import CartItemOrm, CartOrm, SessionLocal

logger = logging.getLogger(__name__)


def _to_cart(orm: CartOrm) -> Cart:
    return Cart(
        user_id=orm.user_id,
        items=[
            CartItem(
                product_id=it.product_id,
                name=it.name,
                price=Decimal(it.price),
                img_url=it.img_url,
                quantity=it.quantity,
            )
            for it in orm.items
        ],
        full_price=Decimal(str(orm.full_price)),
        version=orm.version,
    )


def _load(session: Session, user_id: str) -> CartOrm | None:
    return session.execute(
        select(CartOrm)
        .options(selectinload(CartOrm.items))
        .where(CartOrm.user_id == user_id)
    ).scalar_one_or_none()


def find_by_user(user_id: str) -> Cart | None:
    try:
        with SessionLocal() as session:
            orm = _load(session, user_id)
            return _to_cart(orm) if orm is not None else None
    except SQLAlchemyError as exc:
        logger.exception("Failed to load cart for user %s", user_id)
        raise PersistenceError() from exc


def create(user_id: str) -> Cart:
    try:
        with SessionLocal.begin() as session:
            orm = CartOrm(user_id=user_id, full_price=Decimal("0.00"), version=0)
            session.add(orm)
            session.flush()
    except IntegrityError:
        # lost a race against another request creating the same cart
        existing = find_by_user(user_id)
        if existing is None:
            raise CartConflictError()
        return existing
    except SQLAlchemyError as exc:
        logger.exception("Failed to create cart for user %s", user_id)
        raise PersistenceError() from exc

    logger.info("Created cart for user %s", user_id)
    return Cart(user_id=user_id, items=[], full_price=Decimal("0.00"), version=0)


def _cart_set_items(session: Session, cart_id: int, items: List[CartItem]) -> None:
    session.execute(sa_delete(CartItemOrm).where(CartItemOrm.cart_id == cart_id))
    for position, it in enumerate(items):
        session.add(
            CartItemOrm(
                cart_id=cart_id,
                product_id=it.product_id,
                position=position,
                name=it.name,
                price=str(it.price),
                img_url=it.img_url,
                quantity=it.quantity,
            )
        )


def save(cart: Cart) -> Cart:
    """Persist `cart` if nobody saved this user's cart since it was loaded.

    The version check and the write happen in one transaction, so a
    `CartConflictError` leaves the stored cart exactly as the winner left it.
    """
    try:
        with SessionLocal.begin() as session:
            result = session.execute(
                sa_update(CartOrm)
                .where(CartOrm.user_id == cart.user_id, CartOrm.version == cart.version)
                .values(full_price=cart.full_price, version=CartOrm.version + 1)
            )
            if result.rowcount != 1:
                raise CartConflictError()
            cart_id = session.execute(
                select(CartOrm.id).where(CartOrm.user_id == cart.user_id)
            ).scalar_one()
            _cart_set_items(session, cart_id, cart.items)
            session.flush()
    except SQLAlchemyError as exc:
        logger.exception("Failed to save cart for user %s", cart.user_id)
        raise PersistenceError() from exc

    return Cart(
        user_id=cart.user_id,
        items=list(cart.items),
        full_price=cart.full_price,
        version=cart.version + 1,
    )


def delete_by_user(user_id: str) -> bool:
    try:
        with SessionLocal.begin() as session:
            cart_id = session.execute(
                select(CartOrm.id).where(CartOrm.user_id == user_id)
            ).scalar_one_or_none()
            if cart_id is None:
                return False
            session.execute(sa_delete(CartItemOrm).where(CartItemOrm.cart_id == cart_id))
            session.execute(sa_delete(CartOrm).where(CartOrm.id == cart_id))
    except SQLAlchemyError as exc:
        logger.exception("Failed to delete cart for user %s", user_id)
        raise PersistenceError() from exc

    logger.info("Deleted cart for user %s", user_id)
    return True


def ping() -> None:
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise PersistenceError() from exc
