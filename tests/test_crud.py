# tests/test_crud.py
import json
from datetime import datetime, timezone
import pytest
from sqlalchemy.exc import OperationalError
from raqam import crud, storage
from raqam.schemas import AppPreferences, ListingCreate


async def _raw(db):
    return await storage.multi_get(db, crud.ALL_KEYS)


def _storage_down(*args, **kwargs):
    raise OperationalError("SELECT value FROM kv_store", {}, Exception("unable to open database file"))


@pytest.mark.asyncio
async def test_initialize_seeds_listings_and_user(db):
    await crud.initialize(db)
    listings = await crud.list_listings(db)
    assert [l.id for l in listings] == ["1", "2", "3", "4", "5"]
    assert not any(l.is_favorite for l in listings)
    assert {l.category for l in listings} == {"car_plate", "mobile_number"}
    user = await crud.get_user(db)
    assert user is not None
    assert user.id == "current_user"


@pytest.mark.asyncio
async def test_initialize_is_idempotent(db):
    await crud.initialize(db)
    once = await _raw(db)
    await crud.initialize(db)
    assert await _raw(db) == once


@pytest.mark.asyncio
async def test_initialize_does_not_reseed_empty_collection(db):
    await storage.set_item(db, crud.LISTINGS_KEY, "[]")
    await crud.initialize(db)
    assert await crud.list_listings(db) == []
    # the user key was absent, so it still gets seeded
    assert await crud.get_user(db) is not None


@pytest.mark.asyncio
async def test_stored_json_uses_camel_case_and_omits_is_favorite(db):
    await crud.initialize(db)
    await crud.toggle_favorite(db, "1")
    stored = json.loads(await storage.get_item(db, crud.LISTINGS_KEY))
    assert {"sellerId", "sellerName", "createdAt"} <= set(stored[0])
    assert "isFavorite" not in stored[0]


@pytest.mark.asyncio
async def test_toggle_favorite_marks_listing(db):
    await crud.initialize(db)
    assert await crud.toggle_favorite(db, "2") is True
    listings = {l.id: l for l in await crud.list_listings(db)}
    assert listings["2"].is_favorite is True
    assert listings["1"].is_favorite is False
    assert await crud.get_favorites(db) == ["2"]


@pytest.mark.asyncio
async def test_toggle_favorite_twice_restores_set(db):
    await crud.toggle_favorite(db, "4")
    before = await crud.get_favorites(db)
    first = await crud.toggle_favorite(db, "1")
    second = await crud.toggle_favorite(db, "1")
    assert second is (not first)
    assert await crud.get_favorites(db) == before


@pytest.mark.asyncio
async def test_favorites_drop_duplicates_and_garbage(db):
    await storage.set_item(db, crud.FAVORITES_KEY, json.dumps(["1", "1", 7, "3"]))
    assert await crud.get_favorites(db) == ["1", "3"]
    await storage.set_item(db, crud.FAVORITES_KEY, "{broken")
    assert await crud.get_favorites(db) == []


@pytest.mark.asyncio
async def test_create_listing_prepends_and_copies_seller(db):
    await crud.initialize(db)
    before = datetime.now(timezone.utc).replace(microsecond=0)
    created = await crud.create_listing(db, {
        "category": "mobile_number",
        "number": "0555 000 000",
        "price": 9000,
        "description": "",
        "location": "jeddah",
    })
    after = datetime.now(timezone.utc)
    assert created is not None
    assert created.id and created.id not in {"1", "2", "3", "4", "5"}
    assert before <= created.created_at <= after
    assert created.seller_id == "current_user"
    assert created.seller_name == "محمد أحمد"
    listings = await crud.list_listings(db)
    assert listings[0].id == created.id
    assert len(listings) == 6


@pytest.mark.asyncio
async def test_create_then_get_round_trip(db):
    data = ListingCreate(category="car_plate", number="X 9", price=1500.5, description="نادر", location="riyadh")
    created = await crud.create_listing(db, data)
    fetched = await crud.get_listing(db, created.id)
    assert fetched.model_dump() == created.model_dump()
    assert fetched.model_dump(include=set(ListingCreate.model_fields)) == data.model_dump()


@pytest.mark.asyncio
async def test_create_listing_without_user_uses_placeholder_seller(db):
    created = await crud.create_listing(db, {"category": "car_plate", "number": "A 1", "price": 1, "location": "x"})
    assert created.seller_id == crud.FALLBACK_SELLER_ID
    assert created.seller_name == crud.FALLBACK_SELLER_NAME


@pytest.mark.asyncio
async def test_create_listing_rejects_negative_price(db):
    assert await crud.create_listing(db, {"category": "car_plate", "number": "A 1", "price": -5, "location": "x"}) is None
    assert await storage.get_item(db, crud.LISTINGS_KEY) is None


@pytest.mark.asyncio
async def test_get_listing_not_found(db):
    await crud.initialize(db)
    assert await crud.get_listing(db, "nope") is None


@pytest.mark.asyncio
async def test_delete_listing_is_idempotent(db):
    await crud.initialize(db)
    await crud.delete_listing(db, "3")
    once = await storage.get_item(db, crud.LISTINGS_KEY)
    await crud.delete_listing(db, "3")
    assert await storage.get_item(db, crud.LISTINGS_KEY) == once
    assert [l.id for l in await crud.list_listings(db)] == ["1", "2", "4", "5"]


@pytest.mark.asyncio
async def test_delete_missing_listing_does_not_block_seeding(db):
    await crud.delete_listing(db, "1")
    assert await storage.get_item(db, crud.LISTINGS_KEY) is None
    await crud.initialize(db)
    assert len(await crud.list_listings(db)) == 5


@pytest.mark.asyncio
async def test_update_user_merges_shallowly(db):
    await crud.initialize(db)
    updated = await crud.update_user(db, {"bio": "جديد"})
    assert updated.bio == "جديد"
    assert updated.name == "محمد أحمد"
    assert updated.phone == "0555 999 888"
    assert (await crud.get_user(db)).model_dump() == updated.model_dump()


@pytest.mark.asyncio
async def test_update_user_never_creates_one(db):
    assert await crud.update_user(db, {"name": "Ghost"}) is None
    assert await crud.get_user(db) is None


@pytest.mark.asyncio
async def test_get_my_listings(db):
    assert await crud.get_my_listings(db) == []
    await crud.initialize(db)
    assert await crud.get_my_listings(db) == []
    created = await crud.create_listing(db, {"category": "car_plate", "number": "M 1", "price": 10, "location": "dammam"})
    mine = await crud.get_my_listings(db)
    assert [l.id for l in mine] == [created.id]


@pytest.mark.asyncio
async def test_clear_all_removes_only_owned_keys(db):
    await crud.initialize(db)
    await crud.toggle_favorite(db, "1")
    await crud.set_theme_preference(db, "dark")
    await crud.set_app_preference(db, "currency", "usd")
    await storage.set_item(db, "someone_else", "keep")
    await crud.clear_all(db)
    assert await storage.get_all_keys(db) == ["someone_else"]
    assert (await crud.get_app_preferences(db)).model_dump() == {"language": "ar", "currency": "sar", "location": "riyadh"}
    assert await crud.get_theme_preference(db) is None


@pytest.mark.asyncio
async def test_corrupt_listings_read_as_empty(db):
    await storage.set_item(db, crud.LISTINGS_KEY, "{not json")
    assert await crud.list_listings(db) == []


@pytest.mark.asyncio
async def test_malformed_listing_records_are_skipped(db):
    await crud.initialize(db)
    stored = json.loads(await storage.get_item(db, crud.LISTINGS_KEY))
    stored.append({"id": "broken", "category": "boat"})
    await storage.set_item(db, crud.LISTINGS_KEY, json.dumps(stored))
    assert [l.id for l in await crud.list_listings(db)] == ["1", "2", "3", "4", "5"]


@pytest.mark.asyncio
async def test_theme_preference(db):
    assert await crud.get_theme_preference(db) is None
    await crud.set_theme_preference(db, "system")
    assert await crud.get_theme_preference(db) == "system"
    await storage.set_item(db, crud.THEME_KEY, "sepia")
    assert await crud.get_theme_preference(db) is None


@pytest.mark.asyncio
async def test_app_preferences_normalize_legacy_labels(db):
    await storage.set_item(db, crud.LANGUAGE_KEY, "English")
    await storage.set_item(db, crud.CURRENCY_KEY, "درهم إماراتي")
    await storage.set_item(db, crud.LOCATION_KEY, "Mecca")
    assert (await crud.get_app_preferences(db)).model_dump() == {"language": "en", "currency": "aed", "location": "mecca"}


@pytest.mark.asyncio
async def test_set_app_preference_writes_token(db):
    await crud.set_app_preference(db, "location", "dammam")
    assert await storage.get_item(db, crud.LOCATION_KEY) == "dammam"
    assert (await crud.get_app_preferences(db)).location == "dammam"
    await crud.set_app_preference(db, "timezone", "utc")
    assert "utc" not in [v for _, v in await _raw(db)]


@pytest.mark.asyncio
async def test_storage_failures_degrade_to_defaults(db, monkeypatch):
    await crud.initialize(db)
    monkeypatch.setattr(storage, "get_item", _storage_down)
    monkeypatch.setattr(storage, "multi_get", _storage_down)
    monkeypatch.setattr(storage, "set_item", _storage_down)
    monkeypatch.setattr(storage, "multi_remove", _storage_down)

    await crud.initialize(db)
    assert await crud.list_listings(db) == []
    assert await crud.get_listing(db, "1") is None
    assert await crud.create_listing(db, {"category": "car_plate", "number": "A 1", "price": 1, "location": "x"}) is None
    await crud.delete_listing(db, "1")
    assert await crud.get_user(db) is None
    assert await crud.update_user(db, {"name": "x"}) is None
    assert await crud.get_favorites(db) == []
    assert await crud.toggle_favorite(db, "1") is False
    assert await crud.get_my_listings(db) == []
    await crud.clear_all(db)
    assert await crud.get_theme_preference(db) is None
    await crud.set_theme_preference(db, "dark")
    assert (await crud.get_app_preferences(db)).model_dump() == AppPreferences().model_dump()
    await crud.set_app_preference(db, "language", "en")


@pytest.mark.asyncio
async def test_update_user_keeps_unknown_stored_fields(db):
    await storage.set_item(db, crud.USER_KEY, json.dumps({"id": "u", "name": "n", "email": "e@x"}))
    updated = await crud.update_user(db, {"bio": "b"})
    assert updated.bio == "b"
    raw = json.loads(await storage.get_item(db, crud.USER_KEY))
    assert raw == {"id": "u", "name": "n", "email": "e@x", "bio": "b"}


@pytest.mark.asyncio
async def test_create_listing_rejects_infinite_price(db):
    created = await crud.create_listing(db, {"category": "car_plate", "number": "A 1", "price": float("inf"), "location": "x"})
    assert created is None
    assert await storage.get_item(db, crud.LISTINGS_KEY) is None


@pytest.mark.asyncio
async def test_set_app_preference_warns_on_non_canonical_value(db, caplog):
    await crud.set_app_preference(db, "currency", "Saudi Riyal")
    assert "Non-canonical currency preference" in caplog.text
    assert await storage.get_item(db, crud.CURRENCY_KEY) == "Saudi Riyal"
    assert (await crud.get_app_preferences(db)).currency == "sar"

    caplog.clear()
    await crud.set_app_preference(db, "currency", "usd")
    assert "Non-canonical" not in caplog.text
