"""Per-user grade cache kept inside the store's config document."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from gradetools.errors import StoreError
from gradetools.models import Course
from gradetools.storage import KeyValueStore

_LOGGER = logging.getLogger(__name__)

USER_KEY_PREFIX = "USERDATA_"


def _setting(value: bool) -> Dict[str, bool]:
    return {"value": value, "changed": False}


def get_default_config() -> Dict[str, Any]:
    """Config handed to a brand-new install."""
    return {"opted_in": _setting(False), "percent_main_page": _setting(True)}


def fill_config_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Add missing settings in place; present values are never touched."""
    for name in ("opted_in", "showExtensionInfo", "percent_main_page"):
        if config.get(name) is None:
            config[name] = _setting(True)
    if not isinstance(config.get("user_data"), dict):
        config["user_data"] = {}
    return config


def user_key(username: str) -> str:
    return f"{USER_KEY_PREFIX}{username}"


async def get_local_config(store: KeyValueStore) -> Dict[str, Any]:
    return await store.get(None) or {}


async def load_user_courses(
    store: KeyValueStore, username: str
) -> Optional[List[Course]]:
    try:
        found = await store.get("user_data")
    except StoreError as exc:
        _LOGGER.warning("Could not read cached grades for %s: %s", username, exc)
        return None
    user_data = found.get("user_data")
    if not isinstance(user_data, dict):
        return None
    record = user_data.get(user_key(username))
    if not isinstance(record, dict):
        return None
    return [
        Course.from_dict(item)
        for item in record.get("courses") or []
        if isinstance(item, dict)
    ]


async def load_most_recent_courses(store: KeyValueStore) -> Optional[List[Course]]:
    try:
        found = await store.get("most_recent_user")
    except StoreError as exc:
        _LOGGER.warning("Could not read the most recent user: %s", exc)
        return None
    username = found.get("most_recent_user")
    if not username:
        return None
    return await load_user_courses(store, username)


async def save_user_courses(
    store: KeyValueStore, username: str, courses: Iterable[Course]
) -> None:
    """Replace ``username``'s cached courses and mark them most recent.

    Other users' entries are kept. Courses cached earlier for the same user
    but absent from ``courses`` are dropped.
    """
    config = fill_config_defaults(await get_local_config(store))
    course_list = [course.to_dict() for course in courses]
    config["user_data"][user_key(username)] = {"courses": course_list}
    config["most_recent_user"] = username
    try:
        await store.set(config)
    except StoreError:
        _LOGGER.exception("Saving %d courses for %s failed", len(course_list), username)
        raise
    _LOGGER.info("Cached %d courses for %s", len(course_list), username)
