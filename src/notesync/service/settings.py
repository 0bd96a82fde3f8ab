# SPDX-License-Identifier: MIT

from typing import Any

from notesync import configuration
from notesync.model.sync_type import SyncType
from notesync.service.template import validate_note_template


def prepare_settings(**settings: Any) -> dict[str, Any]:
    """
    Check new settings before they are stored.

    Unset (None) values are dropped. A note template must pass validation,
    a sync type must be known, and choosing a two-way sync type puts the
    default note template back because pushing reads that field layout.

    Raises:
        TemplateError: If the note template is invalid.
        ValueError: If the sync type is unknown.
    """
    prepared = {key: value for key, value in settings.items() if value is not None}

    if "note_template" in prepared:
        validate_note_template(prepared["note_template"])

    if "sync_type" in prepared:
        sync_type = SyncType(prepared["sync_type"])
        prepared["sync_type"] = sync_type.value
        if sync_type.is_two_way:
            prepared["note_template"] = configuration.DEFAULT_NOTE_TEMPLATE

    if "date_format" in prepared and not prepared["date_format"].strip():
        prepared["date_format"] = configuration.DEFAULT_DATE_FORMAT
    if "title_template" in prepared and not prepared["title_template"].strip():
        prepared["title_template"] = configuration.DEFAULT_TITLE_TEMPLATE

    return prepared
