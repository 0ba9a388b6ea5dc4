"""Storefront database models.

Seven content collections (projects, pricing, reviews, terms_sections,
additional_terms, faqs, site_content) plus the two auth tables used by
the auth gateway (users, auth_sessions).
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are timezone-naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Enums ---


class Category(str, enum.Enum):
    CHARACTERS = "Characters"
    UGC = "UGC"
    WEAPONS = "Weapons"
    STUD_STYLE = "Stud Style"
    VEHICLES = "Vehicles"


class TermsIcon(str, enum.Enum):
    FILE_TEXT = "FileText"
    CREDIT_CARD = "CreditCard"
    CLOCK = "Clock"
    SHIELD = "Shield"


# --- Content collections ---


class Project(Base):
    """A portfolio piece with one or more colour/style variants."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    image_url: Mapped[str] = mapped_column(String(1000), default="")
    images: Mapped[list] = mapped_column(JSON, default=list)  # [{url, color, name}]
    category: Mapped[str] = mapped_column(String(50), default=Category.CHARACTERS.value)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class PricingPlan(Base):
    __tablename__ = "pricing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[float] = mapped_column(Float, default=0)
    price_label: Mapped[str] = mapped_column(String(100), default="per model")
    delivery_time: Mapped[str] = mapped_column(String(100), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    features: Mapped[list] = mapped_column(JSON, default=list)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class Review(Base):
    """A client review. Only approved reviews are shown publicly."""

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    rating: Mapped[int] = mapped_column(Integer)  # 1-5
    review_text: Mapped[str] = mapped_column(Text)
    discord_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord_avatar: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class TermsSection(Base):
    __tablename__ = "terms_sections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255))
    icon: Mapped[str] = mapped_column(String(50), default=TermsIcon.FILE_TEXT.value)
    items: Mapped[list] = mapped_column(JSON, default=list)
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class AdditionalTerm(Base):
    __tablename__ = "additional_terms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255))
    content: Mapped[str] = mapped_column(Text, default="")
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class FAQ(Base):
    __tablename__ = "faqs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    question: Mapped[str] = mapped_column(String(500))
    answer: Mapped[str] = mapped_column(Text, default="")
    order_index: Mapped[int] = mapped_column(Integer, default=0)


class SiteContent(Base):
    """Free-form content blob for one section of one page."""

    __tablename__ = "site_content"
    __table_args__ = (UniqueConstraint("page", "section", name="uq_site_content_page_section"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    page: Mapped[str] = mapped_column(String(50))
    section: Mapped[str] = mapped_column(String(100))
    content: Mapped[dict] = mapped_column(JSON, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# --- Auth ---


class User(Base):
    """A signed-up identity (email/password or Discord)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    provider: Mapped[str] = mapped_column(String(20), default="email")  # email, discord
    provider_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    expires_at: Mapped[datetime] = mapped_column(DateTime)


# Collection name -> model, for the generic store operations
COLLECTIONS: dict[str, type[Base]] = {
    "projects": Project,
    "pricing": PricingPlan,
    "reviews": Review,
    "terms_sections": TermsSection,
    "additional_terms": AdditionalTerm,
    "faqs": FAQ,
}
