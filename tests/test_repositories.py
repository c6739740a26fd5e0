import pytest

from model.hts import ContextKind, HeadingInfo, ManualEntry, MetalType, ReferenceContext
from repository.context_repository import ContextRepository
from repository.entry_repository import EntryRepository
from repository.namespaces import ENTRIES, META, SCHEMA_VERSION_FIELD, SETTINGS, STORE_SCHEMA_VERSION
from repository.preferences_repository import PreferencesRepository
from repository.store_schema import StoreSchema
from util.enums import ProviderName, Theme
from util.errors import StoreError


def _context(**kw) -> ReferenceContext:
    base = dict(kind=ContextKind.text, content="Heading 7604", name="Annex I")
    base.update(kw)
    return ReferenceContext(**base)


class TestContextRepository:
    @pytest.mark.asyncio
    async def test_save_replaces_wholesale(self, fake_redis):
        repo = ContextRepository()
        await repo.save(_context(extractedHeadings=[HeadingInfo(heading="7604", description="Bars")]))
        await repo.save(_context(name="Annex II"))

        loaded = await repo.get()

        assert loaded.name == "Annex II"
        assert loaded.extractedHeadings is None

    @pytest.mark.asyncio
    async def test_clear(self, fake_redis):
        repo = ContextRepository()
        await repo.save(_context())

        await repo.clear()

        assert await repo.get() is None

    @pytest.mark.asyncio
    async def test_undecodable_row_reads_as_absent(self, fake_redis):
        fake_redis.hashes[SETTINGS] = {"activeContext": '{"kind": "video"}'}

        assert await ContextRepository().get() is None

    @pytest.mark.asyncio
    async def test_offline_store_raises_store_error(self, fake_redis):
        fake_redis.offline = True

        with pytest.raises(StoreError):
            await ContextRepository().save(_context())


class TestEntryRepository:
    @pytest.mark.asyncio
    async def test_put_all_delete(self, fake_redis):
        repo = EntryRepository()
        a = ManualEntry(code="7604.10", category="Bars", description="d", metalType=MetalType.aluminum)
        b = ManualEntry(code="7306", category="Tubes", description="d", metalType=MetalType.steel)
        await repo.put(a)
        await repo.put(b)
        await repo.put(a.model_copy(update={"category": "Bars and rods"}))

        rows = {e.id: e for e in await repo.all()}
        assert set(rows) == {a.id, b.id}
        assert rows[a.id].category == "Bars and rods"

        assert await repo.delete(b.id) == 1
        assert await repo.delete(b.id) == 0
        assert [e.id for e in await repo.all()] == [a.id]

    @pytest.mark.asyncio
    async def test_malformed_rows_are_skipped(self, fake_redis):
        good = ManualEntry(code="7604", category="c", description="d")
        await EntryRepository().put(good)
        fake_redis.hashes[ENTRIES]["broken"] = "not json"

        assert [e.id for e in await EntryRepository().all()] == [good.id]


class TestPreferencesRepository:
    @pytest.mark.asyncio
    async def test_round_trip(self, fake_redis):
        repo = PreferencesRepository()
        assert await repo.get_theme() is None
        assert await repo.get_provider() is None

        await repo.set_theme(Theme.DARK)
        await repo.set_provider(ProviderName.OPENAI)

        assert await repo.get_theme() == Theme.DARK
        assert await repo.get_provider() == ProviderName.OPENAI

    @pytest.mark.asyncio
    async def test_unknown_values_are_ignored(self, fake_redis):
        fake_redis.hashes[SETTINGS] = {"theme": "sepia", "aiProvider": "claude"}
        repo = PreferencesRepository()

        assert await repo.get_theme() is None
        assert await repo.get_provider() is None


class TestStoreSchema:
    @pytest.mark.asyncio
    async def test_fresh_store_is_stamped(self, fake_redis):
        assert await StoreSchema().ensure_schema() == STORE_SCHEMA_VERSION
        assert fake_redis.hashes[META][SCHEMA_VERSION_FIELD] == str(STORE_SCHEMA_VERSION)

    @pytest.mark.asyncio
    async def test_upgrade_keeps_data(self, fake_redis):
        fake_redis.hashes[META] = {SCHEMA_VERSION_FIELD: "1"}
        fake_redis.hashes[ENTRIES] = {"x": "{}"}

        await StoreSchema().ensure_schema()

        assert fake_redis.hashes[META][SCHEMA_VERSION_FIELD] == str(STORE_SCHEMA_VERSION)
        assert fake_redis.hashes[ENTRIES] == {"x": "{}"}

    @pytest.mark.asyncio
    async def test_never_downgrades(self, fake_redis):
        fake_redis.hashes[META] = {SCHEMA_VERSION_FIELD: "9"}

        assert await StoreSchema().ensure_schema() == 9
        assert fake_redis.hashes[META][SCHEMA_VERSION_FIELD] == "9"
