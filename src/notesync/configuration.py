# SPDX-License-Identifier: MIT

from typing import NotRequired, Optional, TypedDict

import platformdirs

APP_NAME = "notesync"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"
LOG_PATH = platformdirs.user_log_path(APP_NAME)

DEFAULT_NOTE_TEMPLATE = """---
# Mandatory fields
id: "${id}"
# Optional fields
title: "${title}"
tags: ${tags}
source: "${source}"
source_title: "${source_title}"
source_description: "${source_description}"
source_image_url: "${source_image_url}"
created_date: "${created_date}"
modified_date: "${last_modified_date}"
---
${content}"""

DEFAULT_TITLE_TEMPLATE = "${title}"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DEFAULT_NOTES_FOLDER = "FleetingNotesApp"
DEFAULT_LINKS_NOTE_TITLE = "Links from Obsidian"
DEFAULT_SYNC_INTERVAL_MINUTES = 30
DEFAULT_REFETCH_BATCH_SIZE = 100


class Configuration(TypedDict):
    vault_path: Optional[str]
    notes_folder: str
    attachments_folder: str
    note_template: str
    title_template: str
    date_format: str
    sync_type: str
    notes_filter: str
    auto_generate_title: bool
    sync_on_startup: bool
    sync_interval_minutes: int
    sync_obsidian_links: bool
    sync_obsidian_links_title: str
    last_sync_time: Optional[str]
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    email: Optional[str]
    password: Optional[str]
    firebase_id: Optional[str]
    supabase_id: Optional[str]
    encryption_key: str
    refetch_batch_size: NotRequired[int]


def get_partitions(config: Configuration) -> list[str]:
    """Tenant partition keys the signed in user owns."""
    return [
        partition
        for partition in (config.get("firebase_id"), config.get("supabase_id"))
        if partition
    ]


def is_signed_in(config: Configuration) -> bool:
    return len(get_partitions(config)) > 0
