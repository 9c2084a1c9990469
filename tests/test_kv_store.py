"""Tests for the kv_store table and org-scoped repositories."""

from datetime import datetime, timezone

from covera.db.base import build_engine
from covera.repositories.activity import ActivityRepository
from covera.repositories.kv import KVStore
from covera.repositories.vendor import VendorRepository
from covera.schemas.activity import Activity
from covera.schemas.vendor import Vendor

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


class TestKVStore:
    async def test_set_get_and_overwrite(self, session):
        kv = KVStore(session)
        await kv.set("vendor:org:1", {"name": "First"})
        await kv.set("vendor:org:1", {"name": "Second"})
        assert await kv.get("vendor:org:1") == {"name": "Second"}
        assert await kv.get("vendor:org:missing") is None

    async def test_prefix_scan_is_ordered_and_literal(self, session):
        kv = KVStore(session)
        await kv.set("vendor:org_1:b", {"id": "b"})
        await kv.set("vendor:org_1:a", {"id": "a"})
        await kv.set("vendor:orgX1:c", {"id": "c"})
        await kv.set("contract:org_1:z", {"id": "z"})

        assert await kv.get_by_prefix("vendor:org_1:") == [{"id": "a"}, {"id": "b"}]

    async def test_delete_and_mdel(self, session):
        kv = KVStore(session)
        for key in ("k:1", "k:2", "k:3"):
            await kv.set(key, {})

        assert await kv.delete("k:1") is True
        assert await kv.delete("k:1") is False
        assert await kv.mdel(["k:2", "k:3", "k:404"]) == 2
        assert await kv.mdel([]) == 0
        assert await kv.keys_by_prefix("k:") == []


class TestRecordRepository:
    async def test_records_are_scoped_to_org(self, session):
        mine = VendorRepository(session, "org-a")
        theirs = VendorRepository(session, "org-b")
        await mine.save(Vendor(id="v1", name="Mine", created_at=NOW, updated_at=NOW))
        await theirs.save(Vendor(id="v2", name="Theirs", created_at=NOW, updated_at=NOW))

        assert [v.name for v in await mine.list()] == ["Mine"]
        assert await mine.get("v2") is None
        assert await mine.count() == 1

    async def test_blobs_use_camel_case_keys(self, session):
        repo = VendorRepository(session, "org-a")
        await repo.save(Vendor(id="v1", name="Mine", contact_name="Pat", created_at=NOW, updated_at=NOW))
        blob = await KVStore(session).get("vendor:org-a:v1")
        assert blob["contactName"] == "Pat"
        assert blob["insuranceExpiry"] is None

    async def test_malformed_blob_is_skipped(self, session):
        await KVStore(session).set("vendor:org-a:broken", {"id": "broken"})
        repo = VendorRepository(session, "org-a")
        await repo.save(Vendor(id="ok", name="Fine", created_at=NOW, updated_at=NOW))
        assert [v.id for v in await repo.list()] == ["ok"]
        assert await repo.get("broken") is None

    async def test_activities_are_grouped_per_vendor(self, session):
        repo = ActivityRepository(session, "org-a")
        for vendor_id, activity_id in (("v1", "a1"), ("v1", "a2"), ("v2", "a3")):
            await repo.save(Activity(
                id=activity_id, vendor_id=vendor_id, action="x", detail="y", created_at=NOW,
            ))

        assert {a.id for a in await repo.list_for_vendor("v1")} == {"a1", "a2"}
        assert await repo.delete_for_vendor("v1") == 2
        assert [a.id for a in await repo.list()] == ["a3"]


class TestEngine:
    async def test_file_database_gets_its_folder_and_wal(self, tmp_path):
        db_file = tmp_path / "data" / "covera.db"
        engine = build_engine(f"sqlite+aiosqlite:///{db_file}")
        try:
            async with engine.connect() as conn:
                mode = (await conn.exec_driver_sql("PRAGMA journal_mode")).scalar()
        finally:
            await engine.dispose()

        assert db_file.parent.is_dir()
        assert mode == "wal"
