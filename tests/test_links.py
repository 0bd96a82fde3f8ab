"""
test_links.py
Tests for vault link aggregation and note listings
"""
import pytest

from notesync.service.links import (
    EMBEDDED_NOTE_TEMPLATE,
    UNPROCESSED_NOTE_TEMPLATE,
    clean_link,
    embed_notes_to_string,
    extract_links,
    get_all_links,
    get_link_text,
    get_notes_with_text,
    get_unprocessed_notes,
)


class TestExtractLinks:
    def test_wikilinks(self):
        text = "[[Plain]] [[With#Heading]] [[Aliased|shown]] [[Block^ref]]"
        assert extract_links(text) == ["Plain", "With", "Aliased", "Block"]

    def test_markdown_links(self):
        text = "[a](Folder/Note.md) [b](<Other%20Note.md>) [c](https://example.com)"
        assert extract_links(text) == ["Folder/Note.md", "Other%20Note.md"]

    @pytest.mark.parametrize(
        "link,expected",
        [
            ("Note", "Note"),
            ("Folder/Note.md", "Note"),
            ("Other%20Note.md", "Other Note"),
            ("  Spaced  ", "Spaced"),
        ],
    )
    def test_clean_link(self, link, expected):
        assert clean_link(link) == expected


class TestGetAllLinks:
    @pytest.mark.asyncio
    async def test_resolved_and_unresolved(self, vault, vault_dir):
        (vault_dir / "A.md").write_text("[[B]] [[Missing]]")
        (vault_dir / "Sub").mkdir()
        (vault_dir / "Sub" / "B.md").write_text("[[A]]")
        (vault_dir / ".obsidian").mkdir()
        (vault_dir / ".obsidian" / "Hidden.md").write_text("[[Secret]]")
        (vault_dir / "image.png").write_bytes(b"\x89PNG")

        assert await get_all_links(vault) == ["A", "B", "Missing"]


class TestUnprocessedNotes:
    @pytest.mark.asyncio
    async def test_checked_tasks_mark_notes_processed(self, vault, vault_dir, local_repository, note_file):
        note_file("Notes/A.md", "a", "first")
        note_file("Notes/B.md", "b", "second")
        note_file("Notes/C.md", "c", "third")
        (vault_dir / "Journal").mkdir()
        (vault_dir / "Journal" / "Review.md").write_text(
            "- [x] reviewed [[A]]\n- [ ] pending [[B]]\n- [x] done [[Notes/C]]\n"
        )

        local_notes = await get_unprocessed_notes(vault, local_repository)

        assert [n["path"] for n in local_notes] == ["Notes/B.md"]
        text = embed_notes_to_string(local_notes, ["Notes/B.md"], UNPROCESSED_NOTE_TEMPLATE)
        assert text == "- [ ] ![[B]]\n"

    @pytest.mark.asyncio
    async def test_checked_task_inside_notes_folder_does_not_count(self, vault, local_repository, note_file):
        note_file("Notes/A.md", "a", "- [x] done [[A]]")

        local_notes = await get_unprocessed_notes(vault, local_repository)

        assert [n["path"] for n in local_notes] == ["Notes/A.md"]


class TestNotesWithText:
    @pytest.mark.asyncio
    async def test_matches_body_and_metadata(self, local_repository, note_file):
        note_file("Notes/A.md", "a", "alpha body")
        note_file("Notes/B.md", "b", "other", source="https://beta.example")
        note_file("Notes/C.md", "c", "nothing")

        local_notes = await get_notes_with_text(local_repository, "beta")
        assert [n["path"] for n in local_notes] == ["Notes/B.md"]

        local_notes = await get_notes_with_text(local_repository, "alpha")
        assert [n["path"] for n in local_notes] == ["Notes/A.md"]


class TestLinkText:
    def test_unique_name(self):
        assert get_link_text("Notes/A.md", ["Notes/A.md", "Other/B.md"]) == "A"

    def test_duplicate_name_uses_path(self):
        assert get_link_text("Notes/A.md", ["Notes/A.md", "Other/A.md"]) == "Notes/A"

    def test_embed_template(self):
        local_notes = [{"path": "Notes/A.md"}, {"path": "Notes/B.md"}]
        text = embed_notes_to_string(local_notes, ["Notes/A.md", "Notes/B.md"], EMBEDDED_NOTE_TEMPLATE)
        assert text == "![[A]]\n\n![[B]]\n\n"
