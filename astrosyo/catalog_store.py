"""Immutable, lazily loaded store of candidate deep-sky objects."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from astrosyo.domain import CelestialObject
from astrosyo.numeric import is_finite_number
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="catalog_store")

BUNDLED_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"

CatalogLoader = Callable[[], Iterable[Mapping[str, Any]]]


def _parse_float(value: Any) -> float | None:
    """Numbers and numeric strings become floats; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if not is_finite_number(value):
        return None
    return float(value)


def _parse_optional(value: Any) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_catalog_records(records: Iterable[Mapping[str, Any]]) -> list[CelestialObject]:
    """
    Convert raw catalog records into CelestialObjects.

    Entries that are not objects, records without an id, or records with missing, non-numeric or out-of-range
    coordinates are skipped. Unparseable magnitudes and sizes become None.
    """
    objects: list[CelestialObject] = []
    seen: set[str] = set()
    skipped = 0
    for row in records:
        if not isinstance(row, Mapping):
            skipped += 1
            logger.debug("Skipping non-object catalog record", extra={"record_type": type(row).__name__})
            continue
        object_id = _parse_optional(row.get("id"))
        ra = _parse_float(row.get("ra_deg"))
        dec = _parse_float(row.get("dec_deg"))
        if object_id is None or ra is None or dec is None or not (0.0 <= ra < 360.0) or not (-90.0 <= dec <= 90.0):
            skipped += 1
            logger.debug("Skipping catalog record with unusable id/coordinates", extra={"record_id": row.get("id")})
            continue
        if object_id in seen:
            logger.warning("Duplicate catalog id; keeping first occurrence", extra={"record_id": object_id})
            continue
        size = _parse_float(row.get("size_major_arcmin"))
        objects.append(
            CelestialObject(
                id=object_id,
                alt_id=_parse_optional(row.get("alt_id")),
                common_name=_parse_optional(row.get("common_name")),
                ra_deg=ra,
                dec_deg=dec,
                apparent_magnitude=_parse_float(row.get("apparent_magnitude")),
                size_major_arcmin=size if size is not None and size >= 0 else None,
                object_type=_parse_optional(row.get("object_type")) or "",
            )
        )
        seen.add(object_id)
    if skipped:
        logger.info("Skipped catalog records", extra={"skipped": skipped})
    return objects


class CatalogStore:
    """Catalog loaded once on first use and read-only afterwards.

    The loader runs at most once even when several requests hit a cold store
    at the same time; later reads take no lock.
    """

    def __init__(self, loader: CatalogLoader, *, name: str = "catalog") -> None:
        """Wrap a loader returning raw records (it is not called yet)."""
        self.name = name
        self._loader = loader
        self._lock = threading.Lock()
        self._objects: Optional[tuple[CelestialObject, ...]] = None
        self._by_id: Mapping[str, CelestialObject] = MappingProxyType({})

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], *, name: str = "inline") -> "CatalogStore":
        """Build a store over records already in memory."""
        frozen = list(records)
        return cls(lambda: frozen, name=name)

    @classmethod
    def from_path(cls, path: Path | str) -> "CatalogStore":
        """Build a store over a JSON file holding an array of records."""
        path = Path(path).expanduser()

        def _load() -> list[Mapping[str, Any]]:
            if not path.exists():
                raise FileNotFoundError(f"Catalog not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError(f"Catalog {path} must contain a JSON array of records")
            return data

        return cls(_load, name=path.name)

    @classmethod
    def bundled(cls) -> "CatalogStore":
        """Store over the catalog shipped with the package."""
        return cls.from_path(BUNDLED_CATALOG_PATH)

    @property
    def loaded(self) -> bool:
        return self._objects is not None

    def objects(self) -> tuple[CelestialObject, ...]:
        """Return all objects, loading them on first call."""
        if self._objects is None:
            with self._lock:
                if self._objects is None:
                    parsed = parse_catalog_records(self._loader())
                    self._by_id = MappingProxyType({o.id: o for o in parsed})
                    self._objects = tuple(parsed)
                    logger.info("Catalog loaded", extra={"catalog": self.name, "objects": len(parsed)})
        return self._objects

    def by_id(self) -> Mapping[str, CelestialObject]:
        """Read-only mapping of object id to object."""
        self.objects()
        return self._by_id

    def get(self, object_id: str) -> CelestialObject | None:
        """Look up one object by id."""
        return self.by_id().get(object_id)

    def __iter__(self) -> Iterator[CelestialObject]:
        return iter(self.objects())

    def __len__(self) -> int:
        return len(self.objects())
