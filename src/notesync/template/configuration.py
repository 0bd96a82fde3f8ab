# SPDX-License-Identifier: MIT

from notesync import configuration
from notesync.model.sync_type import SyncType


def get_configuration_template() -> configuration.Configuration:
    return {
        "vault_path": None,
        "notes_folder": configuration.DEFAULT_NOTES_FOLDER,
        "attachments_folder": "",
        "note_template": configuration.DEFAULT_NOTE_TEMPLATE,
        "title_template": configuration.DEFAULT_TITLE_TEMPLATE,
        "date_format": configuration.DEFAULT_DATE_FORMAT,
        "sync_type": SyncType.ONE_WAY.value,
        "notes_filter": "",
        "auto_generate_title": True,
        "sync_on_startup": False,
        "sync_interval_minutes": configuration.DEFAULT_SYNC_INTERVAL_MINUTES,
        "sync_obsidian_links": False,
        "sync_obsidian_links_title": configuration.DEFAULT_LINKS_NOTE_TITLE,
        "last_sync_time": None,
        "supabase_url": None,
        "supabase_key": None,
        "email": None,
        "password": None,
        "firebase_id": None,
        "supabase_id": None,
        "encryption_key": "",
        "refetch_batch_size": configuration.DEFAULT_REFETCH_BATCH_SIZE,
    }
