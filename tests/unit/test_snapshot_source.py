"""
Unit tests for the static snapshot data source and backend parity.
"""
import pytest

from mockshop.errors import BackendIOError, UnsupportedOperation
from mockshop.storage import DocumentStoreDataSource, JsonStore, StaticSnapshotDataSource


@pytest.mark.unit
class TestStaticSnapshot:
    """Tests for read-only snapshot access."""

    def test_loads_fixture_once(self, snapshot_context, mocker):
        load = mocker.patch("mockshop.storage.snapshot_source.load_fixture",
                            return_value={"products": [{"id": "p1"}]})
        source = snapshot_context.snapshot_source("products")

        source.find()
        source.count()

        assert load.call_count == 1
        assert source.loaded

    @pytest.mark.parametrize("raw,expected", [
        ([{"id": "a"}, {"id": "b"}], ["a", "b"]),
        ({"faq": [{"id": "a"}]}, ["a"]),
        ({"id": "solo"}, ["solo"]),
    ])
    def test_accepts_every_fixture_shape(self, tmp_path, fixture_writer, raw, expected):
        fixture_writer(tmp_path, "faq", raw)
        source = StaticSnapshotDataSource("faq", tmp_path)

        assert [d["id"] for d in source.find()] == expected

    def test_missing_fixture_is_empty(self, tmp_path):
        source = StaticSnapshotDataSource("payments", tmp_path)

        assert source.find() == []
        assert source.count() == 0

    def test_invalid_fixture_raises_backend_error(self, tmp_path):
        (tmp_path / "faq.json").write_text("[oops", encoding="utf-8")

        with pytest.raises(BackendIOError):
            StaticSnapshotDataSource("faq", tmp_path).find()

    def test_writes_are_rejected_and_cache_is_untouched(self, snapshot_context):
        source = snapshot_context.snapshot_source("customers")
        before = source.find()

        with pytest.raises(UnsupportedOperation) as exc_info:
            source.create({"id": "cust_010"})
        assert exc_info.value.operation == "create"
        with pytest.raises(UnsupportedOperation):
            source.update({"id": "cust_001"}, {"$set": {"name": "X"}})
        with pytest.raises(UnsupportedOperation):
            source.delete({"id": "cust_001"})

        assert source.find() == before

    def test_returned_documents_do_not_alias_cache(self, snapshot_context):
        source = snapshot_context.snapshot_source("customers")

        source.find_one({"id": "cust_001"})["name"] = "Changed"

        assert source.find_one({"id": "cust_001"})["name"] == "Jane Doe"

    def test_no_files_are_written(self, snapshot_context, db_dir):
        snapshot_context.snapshot_source("products").find()

        assert not db_dir.exists() or list(db_dir.iterdir()) == []

    def test_reset_drops_cache(self, snapshot_context):
        source = snapshot_context.snapshot_source("products")
        source.find()

        source.reset()

        assert not source.loaded


PARITY_CASES = [
    ({}, {}),
    ({"category": "Electronics"}, {"sort": {"price.amount": 1}}),
    ({"price.amount": {"$gte": 20, "$lte": 100}}, {"sort": {"created_at": -1}, "skip": 1, "limit": 2}),
    ({"$or": [{"brand": "SoundWave"}, {"tags": "coffee"}]}, {"sort": {"name": 1}}),
    ({"name": {"$regex": "book|python", "$options": "i"}}, {"projection": {"id": 1, "name": 1}}),
    ({"in_stock": False}, {"limit": 0}),
    ({}, {"skip": 50, "limit": 10}),
]


@pytest.mark.unit
class TestBackendParity:
    """The same fixtures must read identically from both backends."""

    @pytest.mark.parametrize("query,options", PARITY_CASES)
    def test_find_and_count_match(self, context, query, options):
        store = context.document_source("products")
        snapshot = context.snapshot_source("products")

        assert store.find(query, options) == snapshot.find(query, options)
        assert store.count(query) == snapshot.count(query)

    @pytest.mark.parametrize("raw", [
        {},
        [],
        {"faq": []},
        {"id": "solo", "question": "Q"},
        [{"id": "a"}, {"id": "b"}],
    ])
    def test_fixture_shapes_read_the_same(self, tmp_path, fixture_writer, raw):
        fixtures = tmp_path / "shapes"
        fixture_writer(fixtures, "faq", raw)
        store = DocumentStoreDataSource("faq", JsonStore(tmp_path / "shapes_db"), fixtures)
        snapshot = StaticSnapshotDataSource("faq", fixtures)

        assert store.find() == snapshot.find()
        assert store.count() == snapshot.count()

    def test_parity_after_normalizing(self, context):
        from mockshop.storage.normalize import normalize_collection

        normalize_collection(context, "orders")
        options = {"sort": {"created_at": -1}}

        assert (context.document_source("orders").find({}, options)
                == context.snapshot_source("orders").find({}, options))
