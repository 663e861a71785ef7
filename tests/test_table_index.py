import pytest

from sqlapi.table_index import LookupResult, TableIndexError, TableIndexRegistry


class FakeTables:
    def __init__(self):
        self.rows = {}
        self.scans = 0
        self.broken = set()

    def __call__(self, table_name):
        self.scans += 1
        if table_name in self.broken:
            raise OSError(f"failed to open table file '{table_name}.csv'")
        if table_name not in self.rows:
            raise OSError(f"failed to open table file '{table_name}.csv'")
        return list(self.rows[table_name])


@pytest.fixture
def tables():
    fake = FakeTables()
    fake.rows["users"] = [9, 18, 25]
    return fake


@pytest.fixture
def registry(tables):
    return TableIndexRegistry(tables)


def test_find_row_builds_index(registry):
    assert not registry.is_loaded("users")
    result = registry.find_row("users", 2)
    assert result == LookupResult(found=True, row_offset=18)
    assert registry.is_loaded("users")


def test_find_missing_id_is_not_an_error(registry):
    result = registry.find_row("users", 10)
    assert result.found is False
    assert result.row_offset is None


def test_next_id_follows_row_count(registry):
    assert registry.next_id("users") == 4


def test_next_id_on_empty_table(tables, registry):
    tables.rows["empty"] = []
    assert registry.next_id("empty") == 1
    assert registry.is_loaded("empty")


def test_rebuild_after_reset(tables, registry):
    assert registry.find_row("users", 2).row_offset == 18
    registry.reset()
    assert not registry.is_loaded("users")
    assert registry.find_row("users", 2).row_offset == 18
    assert tables.scans == 2


def test_rebuild_after_invalidate(tables, registry):
    registry.find_row("users", 2)
    assert registry.is_loaded("users")
    registry.invalidate("users")
    assert not registry.is_loaded("users")
    assert registry.find_row("users", 2).row_offset == 18
    assert registry.is_loaded("users")
    assert tables.scans == 2


def test_loaded_index_is_not_rescanned(tables, registry):
    assert registry.find_row("users", 1) == LookupResult(found=True, row_offset=9)
    assert registry.find_row("users", 3) == LookupResult(found=True, row_offset=25)
    assert registry.next_id("users") == 4
    assert tables.scans == 1


def test_invalidate_unknown_table_is_ignored(registry):
    registry.invalidate("nobody")
    assert not registry.is_loaded("nobody")


def test_register_row_advances_next_id(registry):
    next_id = registry.next_id("users")
    registry.register_row("users", next_id, 40)
    assert registry.next_id("users") == next_id + 1
    assert registry.find_row("users", next_id).row_offset == 40


def test_register_duplicate_id_fails(registry):
    with pytest.raises(TableIndexError, match="duplicate id key"):
        registry.register_row("users", 2, 99)
    assert registry.find_row("users", 2).row_offset == 18


def test_forced_register_failure_fires_once(registry):
    registry.force_next_register_failure()
    with pytest.raises(TableIndexError, match="forced index registration failure"):
        registry.register_row("users", 4, 40)
    registry.register_row("users", 4, 40)
    assert registry.find_row("users", 4).row_offset == 40


def test_forced_failure_then_rebuild_finds_appended_row(tables, registry):
    registry.find_row("users", 1)
    registry.force_next_register_failure()
    tables.rows["users"].append(40)
    with pytest.raises(TableIndexError):
        registry.register_row("users", 4, 40)
    registry.invalidate("users")
    assert not registry.is_loaded("users")
    assert registry.find_row("users", 4) == LookupResult(found=True, row_offset=40)
    assert registry.is_loaded("users")


def test_reset_clears_forced_failure(registry):
    registry.force_next_register_failure()
    registry.reset()
    registry.register_row("users", 4, 40)
    assert registry.next_id("users") == 5


def test_scan_failure_leaves_index_unloaded(tables, registry):
    tables.broken.add("users")
    with pytest.raises(TableIndexError, match="failed to open table file"):
        registry.find_row("users", 1)
    assert not registry.is_loaded("users")
    tables.broken.clear()
    assert registry.find_row("users", 1).row_offset == 9


def test_tables_are_independent(tables, registry):
    tables.rows["orders"] = [5]
    registry.find_row("users", 1)
    assert not registry.is_loaded("orders")
    assert registry.next_id("orders") == 2
    assert registry.next_id("users") == 4