# raqam/schemas.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional, get_args

ListingCategory = Literal["car_plate", "mobile_number"]
LISTING_CATEGORIES = get_args(ListingCategory)
CategoryFilter = Literal["all", "car_plate", "mobile_number"]

LanguagePreference = Literal["ar", "en"]
CurrencyPreference = Literal["sar", "aed", "usd", "jod"]
LocationPreference = Literal["riyadh", "jeddah", "dammam", "mecca"]
AppPreferenceKey = Literal["language", "currency", "location"]

ThemePreference = Literal["light", "dark", "system"]
ColorScheme = Literal["light", "dark"]


class CamelModel(BaseModel):
    # stored JSON uses camelCase keys
    model_config = ConfigDict(populate_by_name=True)


class ListingCreate(CamelModel):
    category: ListingCategory
    number: str
    price: float = Field(..., ge=0, allow_inf_nan=False)
    description: str = ""
    location: str


class Listing(ListingCreate):
    id: str
    seller_id: str = Field(..., alias="sellerId")
    seller_name: str = Field(..., alias="sellerName")
    created_at: datetime = Field(..., alias="createdAt")
    # derived from the favorites set at read time, never stored
    is_favorite: bool = Field(False, alias="isFavorite", exclude=True)


class User(CamelModel):
    # unknown stored keys survive a profile edit
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None


class AppPreferences(BaseModel):
    language: LanguagePreference = "ar"
    currency: CurrencyPreference = "sar"
    location: LocationPreference = "riyadh"
