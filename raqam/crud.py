# raqam/crud.py
"""Local store operations over the persistent key-value storage.

Every application collection (listings, current user, favorites and the
theme/locale preferences) lives under one fixed key as a JSON document or a
bare token. Reads always go to storage; nothing is cached here.

None of these helpers raise: storage failures and corrupt documents are
logged and turned into an empty list, ``None``, ``False`` or the default
preferences. Read-modify-write helpers take no lock, so two concurrent
writers to the same key can lose one update; callers serialize them.
"""
import json
from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional, Union, get_args
from . import storage
from .preferences import (
    DEFAULT_PREFERENCES,
    normalize_currency,
    normalize_language,
    normalize_location,
    normalize_theme,
)
from .schemas import (
    AppPreferences,
    CurrencyPreference,
    LanguagePreference,
    Listing,
    ListingCreate,
    LocationPreference,
    ThemePreference,
    User,
    UserUpdate,
)
from .seed import default_user, sample_listings
from .utils import logger

LISTINGS_KEY = "raqam_listings"
USER_KEY = "raqam_user"
FAVORITES_KEY = "raqam_favorites"
THEME_KEY = "raqam_theme_preference"
LANGUAGE_KEY = "raqam_language"
CURRENCY_KEY = "raqam_currency"
LOCATION_KEY = "raqam_default_location"

ALL_KEYS = (
    LISTINGS_KEY,
    USER_KEY,
    FAVORITES_KEY,
    THEME_KEY,
    LANGUAGE_KEY,
    CURRENCY_KEY,
    LOCATION_KEY,
)

PREFERENCE_KEYS = {
    "language": LANGUAGE_KEY,
    "currency": CURRENCY_KEY,
    "location": LOCATION_KEY,
}

PREFERENCE_TOKENS = {
    "language": get_args(LanguagePreference),
    "currency": get_args(CurrencyPreference),
    "location": get_args(LocationPreference),
}

FALLBACK_SELLER_ID = "current_user"
FALLBACK_SELLER_NAME = "مستخدم"


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


def _parse_listings(raw: Optional[str]) -> List[Listing]:
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored listings are not valid JSON, treating as empty: %s", e)
        return []
    if not isinstance(data, list):
        logger.warning("Stored listings are not a list, treating as empty")
        return []
    listings = []
    for item in data:
        try:
            listings.append(Listing.model_validate(item))
        except ValueError as e:
            logger.warning("Skipping malformed stored listing: %s", e)
    return listings


def _parse_favorites(raw: Optional[str]) -> List[str]:
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored favorites are not valid JSON, treating as empty: %s", e)
        return []
    if not isinstance(data, list):
        return []
    favorites = []
    for item in data:
        if isinstance(item, str) and item not in favorites:
            favorites.append(item)
    return favorites


async def _write_listings(db: AsyncSession, listings: List[Listing]) -> None:
    payload = [l.model_dump(mode="json", by_alias=True) for l in listings]
    await storage.set_item(db, LISTINGS_KEY, _dumps(payload))


async def _write_user(db: AsyncSession, user: User) -> None:
    await storage.set_item(db, USER_KEY, _dumps(user.model_dump(by_alias=True, exclude_none=True)))


async def initialize(db: AsyncSession) -> None:
    """Seed sample listings and the default user once; existing keys are left alone."""
    try:
        if await storage.get_item(db, LISTINGS_KEY) is None:
            await _write_listings(db, sample_listings())
            logger.info("Seeded sample listings")
        if await storage.get_item(db, USER_KEY) is None:
            await _write_user(db, default_user())
            logger.info("Seeded default user")
    except Exception as e:
        logger.exception("Error initializing data: %s", e)


async def list_listings(db: AsyncSession) -> List[Listing]:
    try:
        listings = _parse_listings(await storage.get_item(db, LISTINGS_KEY))
        favorites = set(await get_favorites(db))
        return [l.model_copy(update={"is_favorite": l.id in favorites}) for l in listings]
    except Exception as e:
        logger.exception("Error getting listings: %s", e)
        return []


async def get_listing(db: AsyncSession, listing_id: str) -> Optional[Listing]:
    for listing in await list_listings(db):
        if listing.id == listing_id:
            return listing
    return None


async def create_listing(db: AsyncSession, data: Union[ListingCreate, Dict[str, Any]]) -> Optional[Listing]:
    """Prepend a new listing owned by the current user and return it, or None on failure."""
    try:
        if not isinstance(data, ListingCreate):
            data = ListingCreate.model_validate(data)
        user = await get_user(db)
        listings = _parse_listings(await storage.get_item(db, LISTINGS_KEY))
        taken = {l.id for l in listings}
        new_id = uuid4().hex
        while new_id in taken:
            new_id = uuid4().hex
        listing = Listing(
            id=new_id,
            **data.model_dump(),
            seller_id=user.id if user else FALLBACK_SELLER_ID,
            seller_name=user.name if user else FALLBACK_SELLER_NAME,
            created_at=datetime.now(timezone.utc),
        )
        listings.insert(0, listing)
        await _write_listings(db, listings)
        logger.info("Created listing %s", listing.id)
        return listing
    except Exception as e:
        logger.exception("Error creating listing: %s", e)
        return None


async def delete_listing(db: AsyncSession, listing_id: str) -> None:
    try:
        listings = _parse_listings(await storage.get_item(db, LISTINGS_KEY))
        remaining = [l for l in listings if l.id != listing_id]
        if len(remaining) == len(listings):
            return
        await _write_listings(db, remaining)
        logger.info("Deleted listing %s", listing_id)
    except Exception as e:
        logger.exception("Error deleting listing: %s", e)


async def get_user(db: AsyncSession) -> Optional[User]:
    try:
        raw = await storage.get_item(db, USER_KEY)
        if raw is None:
            return None
        return User.model_validate(json.loads(raw))
    except Exception as e:
        logger.exception("Error getting user: %s", e)
        return None


async def update_user(db: AsyncSession, updates: Union[UserUpdate, Dict[str, Any]]) -> Optional[User]:
    """Shallow-merge the provided fields into the current user; never creates one."""
    try:
        if not isinstance(updates, UserUpdate):
            updates = UserUpdate.model_validate(updates)
        user = await get_user(db)
        if user is None:
            return None
        merged = User.model_validate({**user.model_dump(), **updates.model_dump(exclude_unset=True)})
        await _write_user(db, merged)
        return merged
    except Exception as e:
        logger.exception("Error updating user: %s", e)
        return None


async def get_favorites(db: AsyncSession) -> List[str]:
    try:
        return _parse_favorites(await storage.get_item(db, FAVORITES_KEY))
    except Exception as e:
        logger.exception("Error getting favorites: %s", e)
        return []


async def toggle_favorite(db: AsyncSession, listing_id: str) -> bool:
    """Flip membership of `listing_id`; returns True when it is now a favorite."""
    try:
        favorites = _parse_favorites(await storage.get_item(db, FAVORITES_KEY))
        if listing_id in favorites:
            favorites.remove(listing_id)
            now_favorite = False
        else:
            favorites.append(listing_id)
            now_favorite = True
        await storage.set_item(db, FAVORITES_KEY, _dumps(favorites))
        return now_favorite
    except Exception as e:
        logger.exception("Error toggling favorite: %s", e)
        return False


async def get_my_listings(db: AsyncSession) -> List[Listing]:
    user = await get_user(db)
    if user is None:
        return []
    return [l for l in await list_listings(db) if l.seller_id == user.id]


async def clear_all(db: AsyncSession) -> None:
    try:
        await storage.multi_remove(db, ALL_KEYS)
        logger.info("Cleared all local data")
    except Exception as e:
        logger.exception("Error clearing data: %s", e)


async def get_theme_preference(db: AsyncSession) -> Optional[ThemePreference]:
    try:
        return normalize_theme(await storage.get_item(db, THEME_KEY))
    except Exception as e:
        logger.exception("Error getting theme preference: %s", e)
        return None


async def set_theme_preference(db: AsyncSession, value: ThemePreference) -> None:
    try:
        await storage.set_item(db, THEME_KEY, value)
    except Exception as e:
        logger.exception("Error setting theme preference: %s", e)


async def get_app_preferences(db: AsyncSession) -> AppPreferences:
    try:
        (_, language), (_, currency), (_, location) = await storage.multi_get(
            db, [LANGUAGE_KEY, CURRENCY_KEY, LOCATION_KEY]
        )
        return AppPreferences(
            language=normalize_language(language),
            currency=normalize_currency(currency),
            location=normalize_location(location),
        )
    except Exception as e:
        logger.exception("Error getting app preferences: %s", e)
        return DEFAULT_PREFERENCES.model_copy()


async def set_app_preference(db: AsyncSession, key: str, value: str) -> None:
    storage_key = PREFERENCE_KEYS.get(key)
    if storage_key is None:
        logger.error("Unknown app preference %r", key)
        return
    if value not in PREFERENCE_TOKENS[key]:
        logger.warning("Non-canonical %s preference %r written; reads will normalize it", key, value)
    try:
        await storage.set_item(db, storage_key, value)
    except Exception as e:
        logger.exception("Error setting app preference: %s", e)
