# SPDX-License-Identifier: MIT

from notesync.model.note import RemoteNote
from notesync.model.note_id import generate_note_id
from notesync.time import now_iso_str


def get_note_template(partition: str) -> RemoteNote:
    now = now_iso_str()
    return {
        "id": generate_note_id(),
        "title": "",
        "content": "",
        "source": "",
        "source_title": "",
        "source_description": "",
        "source_image_url": "",
        "created_at": now,
        "modified_at": now,
        "deleted": False,
        "shared": False,
        "encrypted": False,
        "_partition": partition,
    }
