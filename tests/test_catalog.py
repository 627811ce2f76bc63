"""Tests for buildlog.catalog — resolve_build and InMemoryBuildCatalog."""

import pytest

from buildlog.cache import CacheStore, generate_get_all_key, generate_key, generate_query_key
from buildlog.catalog import InMemoryBuildCatalog, name_key, resolve_build
from buildlog.errors import NotFoundError
from buildlog.types import Build, ById, ByName, NamedRef

from conftest import make_build


@pytest.fixture
def cache():
    return CacheStore(max_size=100)


@pytest.fixture
def catalog(cache):
    cat = InMemoryBuildCatalog(cache)
    cat.add(make_build(1, "Castle"))
    cat.add(make_build(2, "Tower"))
    return cat


class TestResolveBuild:

    def test_numeric_resolves_by_id(self, catalog):
        assert resolve_build(catalog, "2").name == "Tower"
        assert resolve_build(catalog, ById(1)).name == "Castle"

    def test_name_resolves_exactly(self, catalog):
        assert resolve_build(catalog, "Castle").id == 1
        assert resolve_build(catalog, ByName("Tower")).id == 2

    def test_numeric_falls_back_to_name(self, catalog):
        catalog.add(Build(id=50, name="1984"))
        assert resolve_build(catalog, "1984").id == 50

    def test_unknown_name(self, catalog):
        with pytest.raises(NotFoundError, match="Build with name 'Ghost' not found"):
            resolve_build(catalog, "Ghost")

    def test_unknown_id(self, catalog):
        with pytest.raises(NotFoundError, match="Build with ID '999' not found"):
            resolve_build(catalog, "999")

    def test_name_is_case_sensitive(self, catalog):
        with pytest.raises(NotFoundError):
            resolve_build(catalog, "castle")


class TestCachedReads:

    def test_find_by_id_populates_identity_key(self, catalog, cache):
        build = catalog.find_by_id(1)
        assert cache.get(generate_key("Build", 1)) is build

    def test_find_by_name_populates_identity_key(self, catalog, cache):
        build = catalog.find_by_name("Tower")
        assert cache.get(name_key("Tower")) is build

    def test_find_all_cached(self, catalog, cache):
        builds = catalog.find_all()
        assert [b.id for b in builds] == [1, 2]
        assert cache.get(generate_get_all_key("Build")) == builds

    def test_filter_builds_cached_under_query_key(self, catalog, cache):
        result = catalog.filter_builds(theme="medi", color="gray")
        key = generate_query_key("Build", {"author": None, "name": None, "theme": "medi", "color": "gray"})
        assert [b.name for b in result] == ["Castle", "Tower"]
        assert cache.get(key) == result

    def test_filter_builds_no_match(self, catalog):
        assert catalog.filter_builds(author="Nobody") == []

    def test_corrupt_cached_entry_falls_back_to_store(self, catalog, cache):
        cache.put(generate_key("Build", 1), "garbage")
        assert catalog.find_by_id(1).name == "Castle"

    def test_numeric_name_does_not_shadow_id(self, catalog):
        catalog.add(Build(id=3, name="2"))

        assert catalog.find_by_name("2").id == 3
        found = catalog.find_by_id(2)
        assert (found.id, found.name) == (2, "Tower")
        assert catalog.find_by_name("2").id == 3

    def test_wrong_build_under_id_key_is_replaced(self, catalog, cache):
        cache.put(generate_key("Build", 2), catalog.find_by_id(1))
        assert catalog.find_by_id(2).name == "Tower"

    def test_id_added_after_name_fallback_wins(self, catalog):
        catalog.add(Build(id=50, name="1984"))
        assert resolve_build(catalog, "1984").id == 50

        catalog.add(Build(id=1984, name="Orwell"))
        assert resolve_build(catalog, "1984").id == 1984


class TestWritesInvalidate:

    def test_add_evicts_queries_and_all(self, catalog, cache):
        catalog.find_all()
        catalog.filter_builds(name="Castle")
        catalog.add(Build(id=3, name="Castle Keep"))

        assert cache.get(generate_get_all_key("Build")) is None
        assert [b.name for b in catalog.filter_builds(name="Castle")] == ["Castle", "Castle Keep"]

    def test_update_evicts_old_name(self, catalog, cache):
        catalog.find_by_name("Tower")
        catalog.update(Build(id=2, name="Spire"))

        assert catalog.find_by_name("Tower") is None
        assert catalog.find_by_name("Spire").id == 2
        assert catalog.find_by_id(2).name == "Spire"

    def test_delete(self, catalog):
        catalog.find_by_id(2)
        catalog.delete(2)
        assert catalog.find_by_id(2) is None
        with pytest.raises(NotFoundError):
            catalog.delete(2)

    def test_duplicate_name_rejected(self, catalog):
        with pytest.raises(ValueError, match="already exists"):
            catalog.add(Build(id=0, name="Castle"))

    def test_id_assigned_when_missing(self, cache):
        cat = InMemoryBuildCatalog(cache)
        build = cat.add(Build(id=0, name="Hut"))
        assert build.id == 1

    def test_writes_leave_task_records_alone(self, catalog, cache):
        cache.put("BuildLogTask::abc", "task")
        catalog.add(Build(id=3, name="Wall"))
        assert cache.get("BuildLogTask::abc") == "task"


class TestSeed:

    def test_load_seed(self, tmp_path, cache):
        (tmp_path / "castle.schem").write_bytes(b"12345")
        seed = tmp_path / "builds.yaml"
        seed.write_text(
            "builds:\n"
            "  - name: Castle\n"
            "    authors: [Steve, Alex]\n"
            "    themes: [Medieval]\n"
            "    colors: [Gray]\n"
            "    description: Stone\n"
            "    screenshots: [c1.png]\n"
            "    schem_file: castle.schem\n"
            "  - id: 10\n"
            "    name: Tower\n"
            "    authors:\n"
            "      - {id: 7, name: Notch}\n"
            "      - Steve\n",
            encoding="utf-8",
        )
        cat = InMemoryBuildCatalog(cache)

        assert cat.load_seed(seed) == 2
        castle = cat.find_by_name("Castle")
        assert castle.id == 1
        assert castle.schem_file == b"12345"
        assert [r.name for r in castle.authors] == ["Steve", "Alex"]
        tower = cat.find_by_id(10)
        assert NamedRef(7, "Notch") in tower.authors
        steve_ids = {r.id for r in castle.authors + tower.authors if r.name == "Steve"}
        assert len(steve_ids) == 1
