# SPDX-License-Identifier: MIT

import uuid

type NoteId = str


def generate_note_id() -> NoteId:
    return str(uuid.uuid4())
