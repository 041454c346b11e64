# raqam/services.py
"""Helpers the screens run around the local store: input checks, filtering and search."""
import math
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional
from . import crud
from .auth import AuthIdentity, AuthProvider, AuthResult
from .schemas import LISTING_CATEGORIES, CategoryFilter, Listing, ListingCreate, User
from .utils import logger

DEFAULT_DISPLAY_NAME = "User"


def validate_listing_input(payload: Dict[str, Any]) -> ListingCreate:
    """Check a sell-form payload before it reaches the store.

    Raises ValueError naming the first bad field.
    """
    category = payload.get("category")
    if category not in LISTING_CATEGORIES:
        raise ValueError(f"category must be one of {', '.join(LISTING_CATEGORIES)}")
    number = str(payload.get("number") or "").strip()
    if not number:
        raise ValueError("number is required")
    price = payload.get("price")
    if isinstance(price, str):
        price = price.replace(",", "").strip()
    try:
        price = float(price)
    except (TypeError, ValueError):
        raise ValueError("price must be a number")
    if not math.isfinite(price):
        raise ValueError("price must be a finite number")
    if price < 0:
        raise ValueError("price must not be negative")
    location = str(payload.get("location") or "").strip()
    if not location:
        raise ValueError("location is required")
    description = str(payload.get("description") or "").strip()
    return ListingCreate(
        category=category,
        number=number,
        price=price,
        description=description,
        location=location,
    )


def filter_listings(listings: List[Listing], category: CategoryFilter = "all") -> List[Listing]:
    if category == "all":
        return list(listings)
    return [l for l in listings if l.category == category]


def search_listings(listings: List[Listing], query: Optional[str]) -> List[Listing]:
    """Case-insensitive substring match over number, description, seller and location."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(listings)
    results = []
    for l in listings:
        haystack = " ".join(
            part for part in (l.number, l.description, l.seller_name, l.location) if part
        ).lower()
        if needle in haystack:
            results.append(l)
    return results


def featured_listings(listings: List[Listing], count: int = 3) -> List[Listing]:
    return list(listings[:count])


async def sync_user_from_identity(db: AsyncSession, identity: AuthIdentity) -> Optional[User]:
    """Copy the signed-in identity's display name and phone onto the local user."""
    name = identity.full_name or identity.email or DEFAULT_DISPLAY_NAME
    user = await crud.update_user(db, {"name": name, "phone": identity.phone or ""})
    if user is not None:
        logger.info("Synced local user from identity %s", identity.id)
    return user


async def sign_in(db: AsyncSession, provider: AuthProvider, email: str, password: str) -> AuthResult:
    result = await provider.sign_in(email, password)
    if result.session is not None:
        await sync_user_from_identity(db, result.session.identity)
    return result


async def sign_up(
    db: AsyncSession, provider: AuthProvider, email: str, password: str, full_name: Optional[str] = None
) -> AuthResult:
    """Register with the backend; when it opens a session right away the local user is synced too."""
    result = await provider.sign_up(email, password, full_name=full_name)
    if result.has_session:
        await sync_user_from_identity(db, result.session.identity)
    return result
