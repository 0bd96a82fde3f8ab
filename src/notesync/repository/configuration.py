# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Any, Optional, cast

import pendulum
from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CSafeLoader as SafeLoader
except ImportError:
    from yaml import Dumper, SafeLoader  # type: ignore[assignment]

from notesync import configuration, time
from notesync.template.configuration import get_configuration_template


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        loaded = load(configuration.APP_CONFIG_PATH.read_text(), Loader=SafeLoader)
        if loaded is None:
            loaded = {}

        # Migration: fill in any setting missing from older config files
        config = cast(dict[str, Any], get_configuration_template())
        config.update(loaded)
        self._config = cast(configuration.Configuration, config)

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(self, **settings: Any) -> None:
        """Set the given settings. Unknown keys are rejected."""
        known = get_configuration_template().keys()
        for key, value in settings.items():
            if key not in known:
                raise ValueError(f"Unknown setting: {key}")
            if value is not None:
                self.is_dirty = True
                self.config[key] = value  # type: ignore[literal-required]

    def clear_settings(self, *keys: str) -> None:
        self.is_dirty = True
        for key in keys:
            self.config[key] = None  # type: ignore[literal-required]

    def get_last_sync_time(self) -> pendulum.DateTime:
        last_sync_time = self.config.get("last_sync_time")
        if last_sync_time is None:
            return time.EPOCH
        return time.datetime_from_str(last_sync_time)

    def set_last_sync_time(self, last_sync_time: pendulum.DateTime) -> None:
        self.is_dirty = True
        self.config["last_sync_time"] = time.datetime_to_iso_str(last_sync_time)


CONFIGURATION_REPO = ConfigurationRepository()
