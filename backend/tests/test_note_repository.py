"""
Notekeeper Backend: Note Repository Tests
==========================================

What:  Integration tests for NoteRepository against a temporary SQLite file.

What we test:
    ✅ Create / get round trip, tags storage (empty → NULL)
    ✅ Filter views: all, important, deleted (and their interaction with search)
    ✅ Search on title, content and tags, case-insensitive, wildcards literal
    ✅ Every sort order plus the fallback
    ✅ Trash / restore idempotence, toggle-important as its own inverse
    ✅ Permanent delete, clearing the trash, export, all-or-nothing import
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import update

from app.exceptions import StorageError
from app.models.note import notes_table
from app.repositories.note_query import NoteQuery
from app.schemas.note import NoteCreate, NoteImportItem, NoteUpdate


async def make_note(repository, title="Title", content="Content", **kwargs):
    return await repository.create(NoteCreate(title=title, content=content, **kwargs))


async def set_updated_at(database, note_id, when):
    await database.execute(
        update(notes_table).where(notes_table.c.id == note_id).values(updated_at=when)
    )


def ids(notes):
    return [note.id for note in notes]


class TestCreateAndGet:

    @pytest.mark.asyncio
    async def test_round_trip(self, repository):
        created = await make_note(repository, title="T", content="C", tags=["x", "y"])

        fetched = await repository.get_by_id(created.id)

        assert created.id > 0
        assert fetched.title == "T"
        assert fetched.content == "C"
        assert fetched.tags == ["x", "y"]
        assert fetched.important is False
        assert fetched.deleted is False
        assert fetched.created_at is not None
        assert fetched.updated_at is not None

    @pytest.mark.asyncio
    async def test_empty_tags_stored_as_null(self, repository, database):
        created = await make_note(repository, tags=[])

        raw = await database.execute(
            "SELECT tags FROM notes WHERE id = :id", {"id": created.id}
        )

        assert raw.first()["tags"] is None
        assert (await repository.get_by_id(created.id)).tags == []

    @pytest.mark.asyncio
    async def test_non_ascii_tags_stored_literally(self, repository, database):
        created = await make_note(repository, tags=["работа"])

        raw = await database.execute(
            "SELECT tags FROM notes WHERE id = :id", {"id": created.id}
        )

        assert "работа" in raw.first()["tags"]

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repository):
        assert await repository.get_by_id(999999) is None

    @pytest.mark.asyncio
    async def test_get_returns_trashed_note(self, repository):
        note = await make_note(repository)
        await repository.soft_delete(note.id)

        fetched = await repository.get_by_id(note.id)

        assert fetched is not None
        assert fetched.deleted is True


class TestFilters:

    @pytest_asyncio.fixture
    async def seeded(self, repository):
        plain = await make_note(repository, title="plain")
        starred = await make_note(repository, title="starred", important=True)
        trashed = await make_note(repository, title="trashed")
        trashed_starred = await make_note(repository, title="trashed starred", important=True)
        await repository.soft_delete(trashed.id)
        await repository.soft_delete(trashed_starred.id)
        return plain, starred, trashed, trashed_starred

    @pytest.mark.asyncio
    async def test_all_excludes_trash(self, repository, seeded):
        plain, starred, trashed, trashed_starred = seeded

        notes = await repository.list(NoteQuery.from_params(filter="all"))

        assert set(ids(notes)) == {plain.id, starred.id}
        assert all(not note.deleted for note in notes)

    @pytest.mark.asyncio
    async def test_important_excludes_trash(self, repository, seeded):
        plain, starred, trashed, trashed_starred = seeded

        notes = await repository.list(NoteQuery.from_params(filter="important"))

        assert ids(notes) == [starred.id]

    @pytest.mark.asyncio
    async def test_deleted_returns_only_trash(self, repository, seeded):
        plain, starred, trashed, trashed_starred = seeded

        notes = await repository.list(NoteQuery.from_params(filter="deleted"))

        assert set(ids(notes)) == {trashed.id, trashed_starred.id}
        assert all(note.deleted for note in notes)

    @pytest.mark.asyncio
    async def test_unknown_filter_acts_as_all(self, repository, seeded):
        plain, starred, trashed, trashed_starred = seeded

        notes = await repository.list(NoteQuery.from_params(filter="archived"))

        assert set(ids(notes)) == {plain.id, starred.id}

    @pytest.mark.asyncio
    async def test_empty_result_is_empty_list(self, repository):
        assert await repository.list(NoteQuery.from_params(filter="deleted")) == []


class TestSearch:

    @pytest.mark.asyncio
    async def test_matches_title_content_and_tags(self, repository):
        by_title = await make_note(repository, title="Groceries list", content="none")
        by_content = await make_note(repository, title="Other", content="buy GROCERIES today")
        by_tag = await make_note(repository, title="Tagged", content="x", tags=["Groceries"])
        await make_note(repository, title="Unrelated", content="nothing here")

        notes = await repository.list(NoteQuery.from_params(search="groceries"))

        assert set(ids(notes)) == {by_title.id, by_content.id, by_tag.id}

    @pytest.mark.asyncio
    async def test_tag_substring_matches(self, repository):
        note = await make_note(repository, tags=["homework"])

        notes = await repository.list(NoteQuery.from_params(search="WORK"))

        assert ids(notes) == [note.id]

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, repository):
        percent = await make_note(repository, title="50% off")
        await make_note(repository, title="500 items")

        notes = await repository.list(NoteQuery.from_params(search="50%"))

        assert ids(notes) == [percent.id]

    @pytest.mark.asyncio
    async def test_underscore_is_literal(self, repository):
        snake = await make_note(repository, title="snake_case")
        await make_note(repository, title="snakeXcase")

        notes = await repository.list(NoteQuery.from_params(search="e_c"))

        assert ids(notes) == [snake.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ['", "', '["', '"]', 'x", "y', "x,y"])
    async def test_json_syntax_is_not_tag_content(self, repository, term):
        await make_note(repository, title="alpha", content="beta", tags=["x", "y"])

        assert await repository.list(NoteQuery.from_params(search=term)) == []

    @pytest.mark.asyncio
    async def test_each_tag_matched_separately(self, repository):
        note = await make_note(repository, title="alpha", content="beta", tags=["red", "blue"])

        assert ids(await repository.list(NoteQuery.from_params(search="BLU"))) == [note.id]
        assert await repository.list(NoteQuery.from_params(search="redblue")) == []

    @pytest.mark.asyncio
    async def test_search_and_filter_are_conjunctive(self, repository):
        live = await make_note(repository, title="report draft")
        trashed = await make_note(repository, title="report old")
        await make_note(repository, title="unrelated")
        await repository.soft_delete(trashed.id)

        live_hits = await repository.list(NoteQuery.from_params(filter="all", search="report"))
        trash_hits = await repository.list(NoteQuery.from_params(filter="deleted", search="report"))

        assert ids(live_hits) == [live.id]
        assert ids(trash_hits) == [trashed.id]

    @pytest.mark.asyncio
    async def test_blank_search_is_ignored(self, repository):
        await make_note(repository)
        await make_note(repository)

        notes = await repository.list(NoteQuery.from_params(search="   "))

        assert len(notes) == 2


class TestSorting:

    @pytest_asyncio.fixture
    async def seeded(self, repository, database):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        banana = await make_note(repository, title="banana")
        apple = await make_note(repository, title="apple", important=True)
        cherry = await make_note(repository, title="cherry")
        await set_updated_at(database, banana.id, base)
        await set_updated_at(database, apple.id, base + timedelta(hours=1))
        await set_updated_at(database, cherry.id, base + timedelta(hours=2))
        return banana, apple, cherry

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "sort, expected",
        [
            ("newest", ["cherry", "apple", "banana"]),
            ("oldest", ["banana", "apple", "cherry"]),
            ("alpha-asc", ["apple", "banana", "cherry"]),
            ("alpha-desc", ["cherry", "banana", "apple"]),
            ("important", ["apple", "cherry", "banana"]),
            ("bogus", ["cherry", "apple", "banana"]),
        ],
    )
    async def test_sort_orders(self, repository, seeded, sort, expected):
        notes = await repository.list(NoteQuery.from_params(sort=sort))

        assert [note.title for note in notes] == expected


class TestMutations:

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, repository):
        note = await make_note(repository, title="old", content="old", tags=["a"], important=True)

        updated = await repository.update(
            note.id, NoteUpdate(title="new", content="new body")
        )

        assert updated.id == note.id
        assert updated.title == "new"
        assert updated.content == "new body"
        assert updated.tags == []
        assert updated.important is False
        assert updated.updated_at >= note.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_is_noop(self, repository):
        result = await repository.update(999999, NoteUpdate(title="x", content="y"))

        assert result is None
        assert await repository.export_all() == []

    @pytest.mark.asyncio
    async def test_soft_delete_is_idempotent(self, repository):
        note = await make_note(repository)

        assert await repository.soft_delete(note.id) is True
        assert await repository.soft_delete(note.id) is True

        assert (await repository.get_by_id(note.id)).deleted is True

    @pytest.mark.asyncio
    async def test_restore_is_idempotent(self, repository):
        note = await make_note(repository)
        await repository.soft_delete(note.id)

        await repository.restore(note.id)
        await repository.restore(note.id)

        assert (await repository.get_by_id(note.id)).deleted is False
        assert ids(await repository.list(NoteQuery())) == [note.id]

    @pytest.mark.asyncio
    async def test_soft_delete_missing_reports_false(self, repository):
        assert await repository.soft_delete(999999) is False

    @pytest.mark.asyncio
    async def test_toggle_important_is_its_own_inverse(self, repository, database):
        note = await make_note(repository)
        past = datetime(2026, 1, 1, tzinfo=timezone.utc)

        await set_updated_at(database, note.id, past)
        before_first = (await repository.get_by_id(note.id)).updated_at
        first = await repository.toggle_important(note.id)
        await set_updated_at(database, note.id, past)
        before_second = (await repository.get_by_id(note.id)).updated_at
        second = await repository.toggle_important(note.id)

        assert first.important is True
        assert second.important is False
        assert first.updated_at > before_first
        assert second.updated_at > before_second

    @pytest.mark.asyncio
    async def test_toggle_missing_returns_none(self, repository):
        assert await repository.toggle_important(999999) is None

    @pytest.mark.asyncio
    async def test_hard_delete_removes_row(self, repository):
        note = await make_note(repository)

        assert await repository.hard_delete(note.id) is True

        assert await repository.get_by_id(note.id) is None
        assert await repository.export_all() == []

    @pytest.mark.asyncio
    async def test_clear_deleted_only_removes_trash(self, repository):
        keep = await make_note(repository, title="keep")
        drop_one = await make_note(repository, title="drop one")
        drop_two = await make_note(repository, title="drop two")
        await repository.soft_delete(drop_one.id)
        await repository.soft_delete(drop_two.id)

        removed = await repository.clear_deleted()

        assert removed == 2
        assert ids(await repository.export_all()) == [keep.id]


class TestExportImport:

    @pytest.mark.asyncio
    async def test_export_includes_trash_newest_first(self, repository, database):
        older = await make_note(repository, title="older")
        newer = await make_note(repository, title="newer")
        await repository.soft_delete(older.id)
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        await set_updated_at(database, older.id, base)
        await set_updated_at(database, newer.id, base + timedelta(minutes=5))

        exported = await repository.export_all()

        assert ids(exported) == [newer.id, older.id]
        assert exported[1].deleted is True

    @pytest.mark.asyncio
    async def test_import_assigns_new_ids_and_keeps_flags(self, repository):
        existing = await make_note(repository)
        items = [
            NoteImportItem(id=existing.id, title="a", content="1", tags=["t"], important=True),
            NoteImportItem(title="b", content="2", deleted=True),
        ]

        count = await repository.import_many(items)

        assert count == 2
        exported = await repository.export_all()
        assert len(exported) == 3
        imported = {note.title: note for note in exported if note.id != existing.id}
        assert imported["a"].important is True
        assert imported["a"].tags == ["t"]
        assert imported["b"].deleted is True

    @pytest.mark.asyncio
    async def test_import_is_all_or_nothing(self, repository):
        items = [
            NoteImportItem(title="valid", content="ok"),
            NoteImportItem(title=None, content="missing title"),
        ]

        with pytest.raises(StorageError):
            await repository.import_many(items)

        assert await repository.export_all() == []

    @pytest.mark.asyncio
    async def test_empty_text_rejected_by_store(self, repository):
        # model_construct skips validation, so the table constraint is what rejects it
        items = [
            NoteImportItem(title="valid", content="ok"),
            NoteImportItem.model_construct(title="", content="", tags=[], important=False, deleted=False),
        ]

        with pytest.raises(StorageError):
            await repository.import_many(items)

        assert await repository.export_all() == []

    @pytest.mark.asyncio
    async def test_import_empty_list(self, repository):
        assert await repository.import_many([]) == 0
