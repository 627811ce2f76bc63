"""
Build catalog: the "resolve a build by id or name" collaborator.

``resolve_build`` is the only thing the log pipeline needs. The in-memory
catalog is a read-through user of the shared CacheStore (identity keys,
the "get all" key and query keys), so its traffic competes with task
records for cache capacity exactly as entity reads do in production.
"""

import copy
import itertools
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

import yaml

from .cache import CacheStore, generate_get_all_key, generate_key, generate_query_key
from .errors import NotFoundError
from .types import Build, ById, ByName, Identifier, NamedRef, parse_identifier

logger = logging.getLogger(__name__)

BUILD_ENTITY = "Build"
NAME_KEY_PREFIX = "name="


def name_key(name: str) -> str:
    """Cache key for a by-name lookup, e.g. ``Build::name=Castle``.

    Kept apart from ID keys: a build may be named "2", and ``Build::2``
    belongs to the build whose ID is 2.
    """
    return generate_key(BUILD_ENTITY, f"{NAME_KEY_PREFIX}{name}")


class BuildLookup(Protocol):
    """Read interface the log pipeline depends on."""

    def find_by_id(self, build_id: int) -> Optional[Build]: ...

    def find_by_name(self, name: str) -> Optional[Build]: ...


def resolve_build(lookup: BuildLookup, identifier: Union[Identifier, str, int]) -> Build:
    """
    Resolve an identifier to a build.

    A numeric identifier is tried as an ID first and then as an exact name
    (a build may be literally named "42"); anything else is a name.

    Raises:
        NotFoundError: if neither lookup finds a build
    """
    ident = parse_identifier(identifier)
    if isinstance(ident, ById):
        build = lookup.find_by_id(ident.build_id)
        if build is None and ident.raw:
            build = lookup.find_by_name(ident.raw)
        if build is None:
            raise NotFoundError(f"Build with ID '{ident.raw or ident.build_id}' not found")
        return build

    assert isinstance(ident, ByName)
    build = lookup.find_by_name(ident.name)
    if build is None:
        raise NotFoundError(f"Build with name '{ident.name}' not found")
    return build


class InMemoryBuildCatalog:
    """
    Thread-safe in-memory build store with cached reads.

    Reads go through the cache; writes update the backing dict and evict the
    affected identity keys, the "get all" key and every cached query of the
    Build type.
    """

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache
        self._builds: Dict[int, Build] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._ref_ids: Dict[str, Dict[str, int]] = {"author": {}, "theme": {}, "color": {}}

    # === Writes ===

    def add(self, build: Build) -> Build:
        with self._lock:
            if any(b.name == build.name for b in self._builds.values()):
                raise ValueError(f"A build with name '{build.name}' already exists")
            if not build.id:
                build.id = self._next_id()
            elif build.id in self._builds:
                raise ValueError(f"A build with ID '{build.id}' already exists")
            self._builds[build.id] = copy.deepcopy(build)
        self._invalidate(build)
        logger.info(f"Added build {build.id} ({build.name})")
        return build

    def update(self, build: Build) -> Build:
        with self._lock:
            old = self._builds.get(build.id)
            if old is None:
                raise NotFoundError(f"Build with ID '{build.id}' not found")
            if any(b.name == build.name and b.id != build.id for b in self._builds.values()):
                raise ValueError(f"A build with name '{build.name}' already exists")
            self._builds[build.id] = copy.deepcopy(build)
        self._invalidate(old)
        self._invalidate(build)
        return build

    def delete(self, build_id: int) -> None:
        with self._lock:
            old = self._builds.pop(build_id, None)
        if old is None:
            raise NotFoundError(f"Build with ID '{build_id}' not found")
        self._invalidate(old)
        logger.info(f"Deleted build {build_id} ({old.name})")

    def _invalidate(self, build: Build) -> None:
        self._cache.evict_many([
            generate_key(BUILD_ENTITY, build.id),
            name_key(build.name),
            generate_get_all_key(BUILD_ENTITY),
        ])
        self._cache.evict_query_cache_by_type(BUILD_ENTITY)

    def _next_id(self) -> int:
        while True:
            candidate = next(self._ids)
            if candidate not in self._builds:
                return candidate

    # === Reads ===

    def find_by_id(self, build_id: int) -> Optional[Build]:
        key = generate_key(BUILD_ENTITY, build_id)
        cached = self._cache.get(key, Build)
        if cached is not None:
            if cached.id == build_id:
                return cached
            self._cache.evict(key)
        with self._lock:
            build = self._builds.get(build_id)
        if build is not None:
            self._cache.put(key, build)
        return build

    def find_by_name(self, name: str) -> Optional[Build]:
        key = name_key(name)
        cached = self._cache.get(key, Build)
        if cached is not None:
            if cached.name == name:
                return cached
            self._cache.evict(key)
        with self._lock:
            build = next((b for b in self._builds.values() if b.name == name), None)
        if build is not None:
            self._cache.put(key, build)
        return build

    def find_all(self) -> List[Build]:
        key = generate_get_all_key(BUILD_ENTITY)
        cached = self._cache.get(key, list)
        if cached is not None:
            return cached
        with self._lock:
            builds = sorted(self._builds.values(), key=lambda b: b.id)
        self._cache.put(key, builds)
        return builds

    def filter_builds(
        self,
        author: Optional[str] = None,
        name: Optional[str] = None,
        theme: Optional[str] = None,
        color: Optional[str] = None,
    ) -> List[Build]:
        """Case-insensitive substring filter; every given criterion must match."""
        key = generate_query_key(
            BUILD_ENTITY, {"author": author, "name": name, "theme": theme, "color": color}
        )
        cached = self._cache.get(key, list)
        if cached is not None:
            return cached

        def _hit(needle: Optional[str], haystack: Iterable[str]) -> bool:
            if not needle:
                return True
            needle = needle.lower()
            return any(needle in h.lower() for h in haystack)

        with self._lock:
            result = [
                b for b in sorted(self._builds.values(), key=lambda b: b.id)
                if _hit(name, [b.name])
                and _hit(author, [r.name for r in b.authors])
                and _hit(theme, [r.name for r in b.themes])
                and _hit(color, [r.name for r in b.colors])
            ]
        self._cache.put(key, result)
        return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._builds)

    # === Seeding ===

    def load_seed(self, path: Union[str, Path]) -> int:
        """
        Load builds from a YAML seed file.

        Format:
            builds:
              - name: Castle
                authors: [Steve, Alex]        # names, or {id, name} mappings
                themes: [Medieval]
                colors: [Gray]
                description: A stone castle
                screenshots: [castle1.png]
                schem_file: castle.schem      # relative to the seed file

        Returns:
            Number of builds added
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        entries = data.get("builds", []) if isinstance(data, dict) else data
        added = 0
        for entry in entries or []:
            self.add(self._build_from_dict(entry, path.parent))
            added += 1
        logger.info(f"Loaded {added} build(s) from {path}")
        return added

    def _build_from_dict(self, entry: Dict[str, Any], base_dir: Path) -> Build:
        schem: Optional[bytes] = None
        schem_ref = entry.get("schem_file")
        if schem_ref:
            schem = (base_dir / schem_ref).read_bytes()
        return Build(
            id=int(entry.get("id") or 0),
            name=str(entry["name"]),
            authors=self._refs("author", entry.get("authors")),
            themes=self._refs("theme", entry.get("themes")),
            colors=self._refs("color", entry.get("colors")),
            description=entry.get("description"),
            screenshots=[str(s) for s in entry.get("screenshots") or []],
            schem_file=schem,
        )

    def _refs(self, kind: str, raw: Optional[Iterable[Any]]) -> List[NamedRef]:
        ids = self._ref_ids[kind]
        refs = []
        for item in raw or []:
            if isinstance(item, dict):
                ref = NamedRef(id=int(item["id"]), name=str(item["name"]))
                ids.setdefault(ref.name, ref.id)
            else:
                name = str(item)
                if name not in ids:
                    ids[name] = max(ids.values(), default=0) + 1
                ref = NamedRef(id=ids[name], name=name)
            refs.append(ref)
        return refs
