#!/usr/bin/env python3
"""Place-name to coordinate lookup used for geo-filtered searches."""

import asyncio
import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional

from assignment_models import Coordinates, UpstreamError
from config_utils import get_location_data_url, get_request_timeout
from job_fetcher import fetch_json

logger = logging.getLogger(__name__)

REMOTE_LOCATIONS = frozenset({"remote", "distans"})

_REGION_SUFFIX = re.compile(r"s län$")
_REGION_SUFFIX_BARE = re.compile(r" län$")


def _short_region_name(name: str) -> str:
    """Strip the trailing regional-unit suffix ("Stockholms län" -> "stockholm")"""
    return _REGION_SUFFIX_BARE.sub("", _REGION_SUFFIX.sub("", name))


def build_coordinate_table(data: Mapping[str, Any]) -> Dict[str, Coordinates]:
    """Index regions, municipalities and cities by lower-cased name."""
    table: Dict[str, Coordinates] = {}

    for info in (data.get("län") or {}).values():
        name = info["name"].lower()
        coords = Coordinates(info["lat"], info["lon"])
        table[name] = coords
        short_name = _short_region_name(name)
        if short_name != name:
            table[short_name] = coords

    for info in (data.get("kommuner") or {}).values():
        table[info["name"].lower()] = Coordinates(info["lat"], info["lon"])

    for name, info in (data.get("cities") or {}).items():
        table[name.lower()] = Coordinates(info["lat"], info["lon"])

    return table


def is_remote(location: str) -> bool:
    return location.strip().lower() in REMOTE_LOCATIONS


class LocationResolver:
    """Lazily loaded, process-lifetime coordinate table

    The reference file is fetched once. A failed fetch is logged and leaves the
    table empty; later calls to ``load`` do nothing either way, so callers fall
    back to sending the place name as a plain ``location`` filter.
    """

    def __init__(
        self,
        data_url: Optional[str] = None,
        fetcher: Optional[Callable[[str], Any]] = None,
        timeout: Optional[float] = None,
    ):
        self.data_url = data_url or get_location_data_url()
        self.timeout = timeout if timeout is not None else get_request_timeout()
        self._fetcher = fetcher or self._fetch
        self._table: Dict[str, Coordinates] = {}
        self.loaded = False

    def _fetch(self, url: str) -> Any:
        return fetch_json(url, timeout=self.timeout)

    def load_sync(self) -> None:
        if self.loaded:
            return
        try:
            data = self._fetcher(self.data_url)
            self._table = build_coordinate_table(data)
            logger.info("Loaded %d location coordinates", len(self._table))
        except UpstreamError as e:
            logger.warning("Failed to load location coordinates: %s", e)
        except (AttributeError, KeyError, TypeError) as e:
            logger.error("Malformed location coordinate data from %s: %r", self.data_url, e)
        finally:
            self.loaded = True

    async def load(self) -> None:
        """Load the table without blocking the event loop."""
        if self.loaded:
            return
        await asyncio.to_thread(self.load_sync)

    def resolve(self, name: str) -> Optional[Coordinates]:
        return self._table.get(name.strip().lower())

    def __len__(self) -> int:
        return len(self._table)
