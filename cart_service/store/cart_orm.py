import logging
import time

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    create_engine,
)
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from cart_service.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.database_url, future=True)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)
Base = declarative_base()


class CartOrm(Base):
    __tablename__ = "carts"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    full_price = Column(Numeric(24, 2), nullable=False, default=0)
    version = Column(Integer, nullable=False, default=0)
    items = relationship(
        "CartItemOrm",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemOrm.position",
    )


class CartItemOrm(Base):
    __tablename__ = "cart_items"
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(String(64), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False, default="")
    # str(Decimal) of the unit price snapshot, so no scale is imposed on it
    price = Column(String(64), nullable=False)
    img_url = Column(String(1024), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)

    cart = relationship("CartOrm", back_populates="items")


def init_db(attempts: int = 30, delay: float = 1.0) -> None:
    for attempt in range(1, attempts + 1):
        try:
            Base.metadata.create_all(bind=engine)
            return
        except OperationalError:
            if attempt == attempts:
                raise
            logger.warning("Database not ready (attempt %d/%d), retrying", attempt, attempts)
            time.sleep(delay)
