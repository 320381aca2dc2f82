"""
Sparse per-site key-value bags (profile, settings, social_media).

Each bag is stored as one HSTORE column per site, so every value is a
string or NULL on disk. This module owns the three fixed key sets, the
per-field decoders used on read, and the patch builder used on write.

The write path distinguishes a key that is *absent* from a patch (leave
the stored value alone) from a key explicitly set to ``None`` (store
NULL). Request models should be dumped with ``exclude_unset=True`` so
that distinction survives; ``UNSET`` may also be used as a value to mean
"not present".
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

import structlog

log = structlog.get_logger()


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


# ---------------------------------------------------------------------------
# Decoders (raw hstore string -> typed value)
# ---------------------------------------------------------------------------

Decoder = Callable[[Optional[str]], Any]


def passthrough(value: Optional[str]) -> Optional[str]:
    return value


def string_to_boolean(value: Optional[str]) -> Any:
    """Literal "true"/"false" become booleans; anything else passes through."""
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def string_to_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_timestamp_to_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (ValueError, OverflowError):
        return None


def string_to_number(value: Optional[str]) -> Optional[float | int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Known key sets, one decoder table per bag
# ---------------------------------------------------------------------------

PROFILE_FIELDS: dict[str, Decoder] = {
    "car": passthrough,
    "influencer_optin": string_to_boolean,
    "site_description": passthrough,
    "site_image": passthrough,
    "slug_override": passthrough,
    "author_name": passthrough,
    "contact_email": passthrough,
    "pinterest_email": passthrough,
    "address1": passthrough,
    "city": passthrough,
    "state": passthrough,
    "zipcode": passthrough,
    "country": passthrough,
    "address_verified_at": string_to_date,
    "phone_number": passthrough,
    "author_bio": passthrough,
    "author_image": passthrough,
    "screenshot_timestamp": string_to_number,
    "brands": passthrough,
    "post_rate": string_to_number,
    "video_rate": string_to_number,
    "social_rate": string_to_number,
    "instagram_rate": string_to_number,
    "fblr": string_to_number,
    "given_notice": string_to_boolean,
    "given_notice_on": string_to_date,
    "term_date": string_to_date,
    "accepted_terms_of_service": string_to_boolean,
    "accepted_terms_of_service_on": seconds_timestamp_to_date,
    "accepted_terms_of_service_by": passthrough,
    "country_of_operation": passthrough,
}

SETTINGS_FIELDS: dict[str, Decoder] = {
    "payee_name_updated": string_to_boolean,
    "owned": string_to_boolean,
    "killswitch": string_to_boolean,
    "disable_reporting": string_to_boolean,
    "disable_onboarding_wizard": string_to_boolean,
    "brand_color": passthrough,
    "paypal_email": passthrough,
    "ganalytics_state": passthrough,
    "ganalytics_refresh_token_expired_at": seconds_timestamp_to_date,
    "pro_invited": string_to_boolean,
    "pro_invited_on": seconds_timestamp_to_date,
    "pro_accepted": passthrough,  # "accepted" | "na" | other
    "pro_accepted_on": seconds_timestamp_to_date,
    "pro_accepted_by": passthrough,
    "pro_last_audit": string_to_date,
    "pro_last_inspected": string_to_date,
    "loyalty_bonus_disabled": string_to_boolean,
    "display_revenue_share_override": string_to_number,
    "net30_revenue_share_payments": string_to_boolean,
    "premiere_invited": string_to_boolean,
    "premiere_accepted": string_to_boolean,
    "premiere_accepted_on": seconds_timestamp_to_date,
    "premiere_accepted_by": passthrough,
    "premiere_manage_account": string_to_boolean,
    "premiere_manage_account_enabled_on": string_to_date,
    "premiere_last_audit": string_to_date,
    "premiere_last_inspected": string_to_date,
    "enterprise_tier": string_to_boolean,
    "influencer_non_profit_work": string_to_boolean,
    "influencer_non_profit_rate": string_to_number,
    "recipe_selector": passthrough,
    "recipe_mobile_selector": passthrough,
    "enable_automatic_recipe_selectors": string_to_boolean,
    "zergnet_id": string_to_number,
    "gutter_enable": string_to_boolean,
    "notes": passthrough,
}

SOCIAL_MEDIA_FIELDS: dict[str, Decoder] = {
    "youtube": passthrough,
    "youtube_count": string_to_number,
    "snapchat": passthrough,
    "instagram": passthrough,
    "instagram_count": string_to_number,
    "pinterest": passthrough,
    "pinterest_count": string_to_number,
    "facebook": passthrough,
    "facebook_count": string_to_number,
    "tiktok": passthrough,
    "tiktok_count": string_to_number,
    "twitter": passthrough,
    "twitter_count": string_to_number,
}

# Order here is the order merge statements are emitted in.
BAGS: dict[str, dict[str, Decoder]] = {
    "profile": PROFILE_FIELDS,
    "settings": SETTINGS_FIELDS,
    "social_media": SOCIAL_MEDIA_FIELDS,
}


def bag_for_field(name: str) -> Optional[str]:
    for bag_name, fields in BAGS.items():
        if name in fields:
            return bag_name
    return None


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

class HStoreBag(dict):
    """Decoded bag; known keys are also readable as attributes."""

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


def read_bag(raw: Optional[Mapping[str, Optional[str]]], bag: str) -> HStoreBag:
    """Decode a raw bag. Every known key is present; unknown keys are dropped."""
    decoders = BAGS[bag]
    raw = raw or {}
    return HStoreBag(
        (name, decoder(raw.get(name))) for name, decoder in decoders.items()
    )


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BagMerge:
    """Merge ``values`` into one bag (``bag = bag || values``)."""

    bag: str
    values: dict[str, Optional[str]] = field(default_factory=dict)


def _to_hstore_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def build_patch_statement(patch: Mapping[str, Any]) -> list[BagMerge]:
    """Partition a flat patch into per-bag merges.

    Keys outside the known sets are dropped, as are ``UNSET`` values.
    ``None`` is kept and clears the key. Returns ``[]`` if nothing is left.
    """
    partitioned: dict[str, dict[str, Optional[str]]] = {name: {} for name in BAGS}
    for key, value in patch.items():
        if value is UNSET:
            continue
        bag = bag_for_field(key)
        if bag is None:
            continue
        partitioned[bag][key] = _to_hstore_value(value)
    return [BagMerge(bag=name, values=values) for name, values in partitioned.items() if values]


# ---------------------------------------------------------------------------
# Storage collaborators
# ---------------------------------------------------------------------------

@dataclass
class RawSiteBags:
    site_id: int
    profile: dict[str, Optional[str]]
    settings: dict[str, Optional[str]]
    social_media: dict[str, Optional[str]]
    title: Optional[str] = None
    category_id: Optional[int] = None


class SettingsStore(Protocol):
    async def load_bags(self, site_id: int) -> Optional[RawSiteBags]: ...

    async def apply_merges(
        self,
        site_id: int,
        merges: list[BagMerge],
        columns: Optional[dict[str, Any]] = None,
    ) -> None: ...


class CategoryLinkStore(Protocol):
    async def list_category_ids(self, site_id: int) -> list[int]: ...

    async def delete_links(self, site_id: int, category_ids: list[int]) -> None: ...

    async def insert_links(self, site_id: int, category_ids: list[int]) -> None: ...


async def write_patch(store: SettingsStore, site_id: int, patch: Mapping[str, Any]) -> list[BagMerge]:
    """Build the merges for ``patch`` and apply them; a no-op patch writes nothing."""
    merges = build_patch_statement(patch)
    if merges:
        await store.apply_merges(site_id, merges)
    return merges


# ---------------------------------------------------------------------------
# Category links
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryDiff:
    to_insert: list[int]
    to_delete: list[int]

    @property
    def is_empty(self) -> bool:
        return not self.to_insert and not self.to_delete


def diff_categories(existing: Iterable[int], desired: Iterable[int]) -> CategoryDiff:
    existing = list(dict.fromkeys(existing))
    desired = list(dict.fromkeys(desired))
    return CategoryDiff(
        to_insert=[cid for cid in desired if cid not in existing],
        to_delete=[cid for cid in existing if cid not in desired],
    )


async def reconcile_categories(
    store: CategoryLinkStore, site_id: int, desired_category_ids: Iterable[int]
) -> CategoryDiff:
    """Make the site's category links equal ``desired_category_ids``."""
    existing = await store.list_category_ids(site_id)
    diff = diff_categories(existing, desired_category_ids)
    if diff.is_empty:
        return diff

    writes = []
    if diff.to_delete:
        writes.append(store.delete_links(site_id, diff.to_delete))
    if diff.to_insert:
        writes.append(store.insert_links(site_id, diff.to_insert))
    await asyncio.gather(*writes)

    log.info(
        "site.categories_reconciled",
        site_id=site_id,
        inserted=diff.to_insert,
        deleted=diff.to_delete,
    )
    return diff
