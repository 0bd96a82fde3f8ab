# SPDX-License-Identifier: MIT

from typing import NotRequired, Optional, TypedDict

from notesync.model.note_id import NoteId

# Free-text fields that are encrypted before they leave the machine
ENCRYPTED_FIELDS = ("title", "content", "source")


class Note(TypedDict):
    id: NoteId
    title: NotRequired[Optional[str]]
    content: NotRequired[Optional[str]]
    source: NotRequired[Optional[str]]
    source_title: NotRequired[Optional[str]]
    source_description: NotRequired[Optional[str]]
    source_image_url: NotRequired[Optional[str]]
    created_at: NotRequired[Optional[str]]
    modified_at: NotRequired[Optional[str]]
    deleted: NotRequired[Optional[bool]]
    encrypted: NotRequired[Optional[bool]]


class RemoteNote(Note):
    shared: NotRequired[Optional[bool]]
    _partition: NotRequired[Optional[str]]
