"""Per-course category weighting, stored under ``<course title>-catmap``."""

import logging
from typing import Any, Dict, Union

from gradetools.errors import StoreError
from gradetools.models import NOT_FOUND, NotFound
from gradetools.storage import KeyValueStore

_LOGGER = logging.getLogger(__name__)

CATMAP_SUFFIX = "-catmap"


def weighting_key(course_title: str) -> str:
    return f"{course_title}{CATMAP_SUFFIX}"


async def get_weighting(
    store: KeyValueStore, course_title: str
) -> Union[Dict[str, Any], NotFound]:
    key = weighting_key(course_title)
    try:
        found = await store.get(key)
    except StoreError as exc:
        _LOGGER.warning("Could not read category weighting for %s: %s", course_title, exc)
        return NOT_FOUND
    if key not in found or found[key] is None:
        return NOT_FOUND
    return found[key]


async def save_weighting(
    store: KeyValueStore, course_title: str, weighting: Dict[str, Any]
) -> None:
    key = weighting_key(course_title)
    await store.set({key: dict(weighting)})
    _LOGGER.info("Saved %d category weights for %s", len(weighting), course_title)
