# models.py

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from passlib.context import CryptContext
from database import Base


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Priority(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.hashed_password)

    def set_password(self, password: str) -> None:
        self.hashed_password = pwd_context.hash(password)


class Collection(Base):
    __tablename__ = "collections"
    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), unique=True, nullable=False)
    priority = Column(Enum(Priority, name="priority"), nullable=False)
    # Python-side default keeps microseconds so list ordering follows insertion.
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now_utc, index=True)
    version = Column(Integer, nullable=False, default=1)

    products = relationship(
        "ProductAssociation",
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="ProductAssociation.position",
    )

    # UPDATE/DELETE are guarded by "WHERE version = <loaded version>".
    __mapper_args__ = {"version_id_col": version}


class ProductAssociation(Base):
    __tablename__ = "product_associations"
    id = Column(String(36), primary_key=True, default=_new_id)
    collection_id = Column(String(36), ForeignKey("collections.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    image = Column(String(2048), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    collection = relationship("Collection", back_populates="products")
