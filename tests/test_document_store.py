"""Tests for the document store adapters (in-memory and JSON snapshot)."""

import json
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from portfolio_api.adapters.store.factory import create_document_store, load_profile_seed, seed_profile_if_missing
from portfolio_api.adapters.store.in_memory import InMemoryDocumentStore
from portfolio_api.adapters.store.json_file import JsonFileDocumentStore
from portfolio_api.core.errors import NotFoundAppError, StoreUnavailableError, ValidationAppError
from portfolio_api.schemas.inquiry import ContactSubmission, InquiryUpdate
from portfolio_api.schemas.profile import Profile, ProfileUpdate
from portfolio_api.schemas.project import ProjectCreate, ProjectUpdate


def _project(title: str, *, published: bool) -> ProjectCreate:
    return ProjectCreate(
        title=title,
        description=f"{title} summary",
        full_description=f"{title} long description",
        thumbnail=f"https://cdn.example.com/{title}.jpg",
        technologies=["Python"],
        category="Web",
        published=published,
    )


def _submission() -> ContactSubmission:
    return ContactSubmission(
        name="Ada",
        email="ada@example.com",
        subject="Hi",
        message="This message is long enough to pass validation.",
    )


def _window_start(clock: Mock, seconds: int = 3600) -> datetime:
    return datetime.fromtimestamp(clock(), tz=timezone.utc) - timedelta(seconds=seconds)


class TestProjectVisibility:
    """Public reads only ever see published projects."""

    @pytest.mark.asyncio
    async def test_list_published_excludes_drafts(self, store: InMemoryDocumentStore) -> None:
        live = await store.create_project(_project("live", published=True))
        await store.create_project(_project("draft", published=False))

        published = await store.list_published()

        assert [p.id for p in published] == [live.id]

    @pytest.mark.asyncio
    async def test_admin_listing_includes_drafts(self, store: InMemoryDocumentStore) -> None:
        await store.create_project(_project("live", published=True))
        await store.create_project(_project("draft", published=False))

        everything = await store.list_projects(include_unpublished=True)

        assert {p.title for p in everything} == {"live", "draft"}

    @pytest.mark.asyncio
    async def test_listing_is_newest_first(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        first = await store.create_project(_project("first", published=True))
        clock.return_value += 10
        second = await store.create_project(_project("second", published=True))
        # Same timestamp: later insertion still sorts first
        third = await store.create_project(_project("third", published=True))

        ids = [p.id for p in await store.list_published()]

        assert ids == [third.id, second.id, first.id]

    @pytest.mark.asyncio
    async def test_publishing_is_visible_to_next_listing(self, store: InMemoryDocumentStore) -> None:
        draft = await store.create_project(_project("draft", published=False))
        assert await store.list_published() == []

        await store.update_project(draft.id, ProjectUpdate(published=True))

        assert [p.id for p in await store.list_published()] == [draft.id]

    @pytest.mark.asyncio
    async def test_unpublishing_hides_from_public_reads(self, store: InMemoryDocumentStore) -> None:
        live = await store.create_project(_project("live", published=True))

        await store.update_project(live.id, ProjectUpdate(published=False))

        assert await store.list_published() == []
        with pytest.raises(NotFoundAppError):
            await store.get_project(live.id)

    @pytest.mark.asyncio
    async def test_draft_lookup_matches_missing_lookup(self, store: InMemoryDocumentStore) -> None:
        draft = await store.create_project(_project("draft", published=False))

        with pytest.raises(NotFoundAppError) as hidden:
            await store.get_project(draft.id)
        with pytest.raises(NotFoundAppError) as missing:
            await store.get_project("does-not-exist")

        assert (hidden.value.code, hidden.value.message) == (missing.value.code, missing.value.message)

    @pytest.mark.asyncio
    async def test_admin_lookup_returns_draft(self, store: InMemoryDocumentStore) -> None:
        draft = await store.create_project(_project("draft", published=False))

        fetched = await store.get_project(draft.id, include_unpublished=True)

        assert fetched == draft


class TestProjectLifecycle:
    @pytest.mark.asyncio
    async def test_create_sets_both_timestamps(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        project = await store.create_project(_project("p", published=True))

        expected = datetime.fromtimestamp(clock(), tz=timezone.utc)
        assert project.created_at == expected
        assert project.updated_at == expected
        assert project.id

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at_only(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        project = await store.create_project(_project("p", published=True))
        clock.return_value += 60

        updated = await store.update_project(project.id, ProjectUpdate(title="renamed"))

        assert updated.title == "renamed"
        assert updated.description == project.description
        assert updated.created_at == project.created_at
        assert updated.updated_at == project.updated_at + timedelta(seconds=60)

    @pytest.mark.asyncio
    async def test_read_after_write(self, store: InMemoryDocumentStore) -> None:
        project = await store.create_project(_project("p", published=False))
        await store.update_project(project.id, ProjectUpdate(order=7))

        assert (await store.get_project(project.id, include_unpublished=True)).order == 7

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store: InMemoryDocumentStore) -> None:
        project = await store.create_project(_project("p", published=True))
        project.technologies.append("mutated")

        fetched = await store.get_project(project.id)

        assert fetched.technologies == ["Python"]

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_project_raise(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(NotFoundAppError):
            await store.update_project("missing", ProjectUpdate(title="x"))
        with pytest.raises(NotFoundAppError):
            await store.delete_project("missing")

    @pytest.mark.asyncio
    async def test_delete_removes_project(self, store: InMemoryDocumentStore) -> None:
        project = await store.create_project(_project("p", published=True))

        await store.delete_project(project.id)

        with pytest.raises(NotFoundAppError):
            await store.get_project(project.id, include_unpublished=True)


class TestProfile:
    @pytest.mark.asyncio
    async def test_profile_missing_until_seeded(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(NotFoundAppError):
            await store.get_profile()

    @pytest.mark.asyncio
    async def test_update_profile_merges_fields(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        await store.seed_profile(Profile(name="Ada", title="Engineer", skills=["Python"]))
        clock.return_value += 5

        updated = await store.update_profile(ProfileUpdate(title="Staff Engineer"))

        assert updated.name == "Ada"
        assert updated.title == "Staff Engineer"
        assert updated.skills == ["Python"]
        assert updated.updated_at == datetime.fromtimestamp(clock(), tz=timezone.utc)

    @pytest.mark.asyncio
    async def test_update_missing_profile_raises(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(NotFoundAppError):
            await store.update_profile(ProfileUpdate(title="x"))


class TestInquiries:
    @pytest.mark.asyncio
    async def test_create_inquiry_assigns_server_fields(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        inquiry = await store.create_inquiry(_submission(), "203.0.113.5")

        assert inquiry.id
        assert inquiry.origin == "203.0.113.5"
        assert inquiry.created_at == datetime.fromtimestamp(clock(), tz=timezone.utc)
        assert inquiry.read is False
        assert inquiry.replied is False

    @pytest.mark.asyncio
    async def test_create_inquiry_never_overwrites(self, store: InMemoryDocumentStore) -> None:
        first = await store.create_inquiry(_submission(), "203.0.113.5")
        second = await store.create_inquiry(_submission(), "203.0.113.5")

        assert first.id != second.id
        assert len(await store.list_inquiries()) == 2

    @pytest.mark.asyncio
    async def test_update_only_touches_flags(self, store: InMemoryDocumentStore) -> None:
        inquiry = await store.create_inquiry(_submission(), "203.0.113.5")

        updated = await store.update_inquiry(inquiry.id, InquiryUpdate(read=True))

        assert updated.read is True
        assert updated.replied is False
        assert updated.model_dump(exclude={"read"}) == inquiry.model_dump(exclude={"read"})

    @pytest.mark.asyncio
    async def test_missing_inquiry_operations_raise(self, store: InMemoryDocumentStore) -> None:
        with pytest.raises(NotFoundAppError):
            await store.get_inquiry("missing")
        with pytest.raises(NotFoundAppError):
            await store.update_inquiry("missing", InquiryUpdate(read=True))
        with pytest.raises(NotFoundAppError):
            await store.delete_inquiry("missing")

    @pytest.mark.asyncio
    async def test_count_recent_inquiries_is_per_origin_and_windowed(
        self, store: InMemoryDocumentStore, clock: Mock
    ) -> None:
        await store.create_inquiry(_submission(), "203.0.113.5")
        clock.return_value += 1800
        await store.create_inquiry(_submission(), "203.0.113.5")
        await store.create_inquiry(_submission(), "198.51.100.7")
        clock.return_value += 1801

        window_start = _window_start(clock)

        assert await store.count_recent_inquiries("203.0.113.5", window_start) == 1
        assert await store.count_recent_inquiries("198.51.100.7", window_start) == 1
        assert await store.count_recent_inquiries("192.0.2.1", window_start) == 0

    @pytest.mark.asyncio
    async def test_oldest_recent_inquiry(self, store: InMemoryDocumentStore, clock: Mock) -> None:
        first = await store.create_inquiry(_submission(), "203.0.113.5")
        clock.return_value += 100
        await store.create_inquiry(_submission(), "203.0.113.5")

        oldest = await store.oldest_recent_inquiry_at("203.0.113.5", _window_start(clock))

        assert oldest == first.created_at
        assert await store.oldest_recent_inquiry_at("192.0.2.1", _window_start(clock)) is None


class TestJsonFileStore:
    @pytest.mark.asyncio
    async def test_state_survives_reload(self, tmp_path, clock: Mock) -> None:
        path = tmp_path / "data" / "store.json"
        store = JsonFileDocumentStore(path, clock=clock)
        project = await store.create_project(_project("p", published=False))
        inquiry = await store.create_inquiry(_submission(), "203.0.113.5")
        await store.seed_profile(Profile(name="Ada", title="Engineer"))

        reloaded = JsonFileDocumentStore(path, clock=clock)

        assert await reloaded.get_project(project.id, include_unpublished=True) == project
        assert (await reloaded.get_inquiry(inquiry.id)).origin == "203.0.113.5"
        assert (await reloaded.get_profile()).name == "Ada"

    @pytest.mark.asyncio
    async def test_snapshot_uses_wire_names(self, tmp_path, clock: Mock) -> None:
        path = tmp_path / "store.json"
        store = JsonFileDocumentStore(path, clock=clock)
        await store.create_project(_project("p", published=True))

        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["version"] == 1
        assert "fullDescription" in data["projects"][0]
        assert "createdAt" in data["projects"][0]

    @pytest.mark.asyncio
    async def test_reload_preserves_ordering(self, tmp_path, clock: Mock) -> None:
        path = tmp_path / "store.json"
        store = JsonFileDocumentStore(path, clock=clock)
        first = await store.create_project(_project("first", published=True))
        second = await store.create_project(_project("second", published=True))

        reloaded = JsonFileDocumentStore(path, clock=clock)

        assert [p.id for p in await reloaded.list_published()] == [second.id, first.id]

    def test_corrupt_snapshot_raises_store_unavailable(self, tmp_path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreUnavailableError):
            JsonFileDocumentStore(path)


class TestFailedSnapshotWrite:
    """A write that cannot be persisted leaves memory as it was."""

    @pytest.fixture
    def disk_full(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("No space left on device")

        def install() -> None:
            monkeypatch.setattr(os, "replace", refuse)

        return install

    @pytest.mark.asyncio
    async def test_failed_create_is_not_listed(self, tmp_path, clock: Mock, disk_full) -> None:
        store = JsonFileDocumentStore(tmp_path / "store.json", clock=clock)
        disk_full()

        with pytest.raises(StoreUnavailableError):
            await store.create_project(_project("p", published=True))

        assert await store.list_projects(include_unpublished=True) == []

    @pytest.mark.asyncio
    async def test_failed_inquiries_do_not_count_toward_rate_limit(
        self, tmp_path, clock: Mock, disk_full
    ) -> None:
        store = JsonFileDocumentStore(tmp_path / "store.json", clock=clock)
        disk_full()

        for _ in range(3):
            with pytest.raises(StoreUnavailableError):
                await store.create_inquiry(_submission(), "203.0.113.5")

        assert await store.count_recent_inquiries("203.0.113.5", _window_start(clock)) == 0
        assert await store.list_inquiries() == []

    @pytest.mark.asyncio
    async def test_failed_update_and_delete_keep_previous_state(
        self, tmp_path, clock: Mock, disk_full
    ) -> None:
        store = JsonFileDocumentStore(tmp_path / "store.json", clock=clock)
        project = await store.create_project(_project("p", published=True))
        inquiry = await store.create_inquiry(_submission(), "203.0.113.5")
        await store.seed_profile(Profile(name="Ada", title="Engineer"))
        disk_full()

        with pytest.raises(StoreUnavailableError):
            await store.update_project(project.id, ProjectUpdate(published=False))
        with pytest.raises(StoreUnavailableError):
            await store.delete_project(project.id)
        with pytest.raises(StoreUnavailableError):
            await store.update_inquiry(inquiry.id, InquiryUpdate(read=True))
        with pytest.raises(StoreUnavailableError):
            await store.delete_inquiry(inquiry.id)
        with pytest.raises(StoreUnavailableError):
            await store.update_profile(ProfileUpdate(title="Staff Engineer"))

        assert await store.get_project(project.id) == project
        assert (await store.get_inquiry(inquiry.id)).read is False
        assert (await store.get_profile()).title == "Engineer"

    @pytest.mark.asyncio
    async def test_failed_seed_leaves_profile_missing(self, tmp_path, clock: Mock, disk_full) -> None:
        store = JsonFileDocumentStore(tmp_path / "store.json", clock=clock)
        disk_full()

        with pytest.raises(StoreUnavailableError):
            await store.seed_profile(Profile(name="Ada", title="Engineer"))
        with pytest.raises(NotFoundAppError):
            await store.get_profile()

    @pytest.mark.asyncio
    async def test_snapshot_on_disk_is_unchanged(self, tmp_path, clock: Mock, disk_full) -> None:
        path = tmp_path / "store.json"
        store = JsonFileDocumentStore(path, clock=clock)
        project = await store.create_project(_project("p", published=True))
        before = path.read_text(encoding="utf-8")
        disk_full()

        with pytest.raises(StoreUnavailableError):
            await store.create_project(_project("q", published=True))

        assert path.read_text(encoding="utf-8") == before
        assert [p.id for p in await store.list_published()] == [project.id]
        # No temp files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestFactory:
    def test_memory_backend(self, monkeypatch) -> None:
        from portfolio_api.adapters.store import factory

        monkeypatch.setattr(factory.settings.app, "store_backend", "memory")
        assert isinstance(create_document_store(), InMemoryDocumentStore)

    def test_json_file_backend(self, monkeypatch, tmp_path) -> None:
        from portfolio_api.adapters.store import factory

        monkeypatch.setattr(factory.settings.app, "store_backend", "json_file")
        monkeypatch.setattr(factory.settings.app, "store_path", str(tmp_path / "s.json"))
        store = create_document_store()
        assert isinstance(store, JsonFileDocumentStore)
        assert store.path == tmp_path / "s.json"

    def test_unknown_backend(self, monkeypatch) -> None:
        from portfolio_api.adapters.store import factory

        monkeypatch.setattr(factory.settings.app, "store_backend", "cassandra")
        with pytest.raises(ValidationAppError) as exc_info:
            create_document_store()
        assert exc_info.value.code == "store_unknown_backend"

    def test_load_profile_seed_rejects_invalid_file(self, tmp_path) -> None:
        seed = tmp_path / "profile.json"
        seed.write_text(json.dumps({"bio": "no name"}), encoding="utf-8")

        with pytest.raises(ValidationAppError):
            load_profile_seed(seed)

    @pytest.mark.asyncio
    async def test_seed_profile_if_missing(self, monkeypatch, tmp_path, store: InMemoryDocumentStore) -> None:
        from portfolio_api.adapters.store import factory

        seed = tmp_path / "profile.json"
        seed.write_text(
            json.dumps({"name": "Ada", "title": "Engineer", "resumeUrl": "https://cdn.example.com/cv.pdf"}),
            encoding="utf-8",
        )
        monkeypatch.setattr(factory.settings.app, "profile_seed_file", str(seed))

        assert await seed_profile_if_missing(store) is True
        assert (await store.get_profile()).resume_url == "https://cdn.example.com/cv.pdf"
        # Second run leaves the existing profile alone
        assert await seed_profile_if_missing(store) is False
