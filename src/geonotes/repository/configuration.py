# SPDX-License-Identifier: MIT

from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, cast

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from geonotes import configuration
from geonotes.model.location import Coordinate


class ConfigurationRepository:
    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._config_path = config_path
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config_path(self) -> Path:
        return self._config_path or configuration.APP_CONFIG_PATH

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError()
        return self._config

    def __load_data(self) -> None:
        loaded: Optional[dict[str, Any]] = None
        if self.config_path.is_file():
            loaded = load(self.config_path.read_text(), Loader=Loader)

        # Back-fill keys added after the file was written
        config = cast(dict[str, Any], configuration.get_default_config())
        if loaded is not None:
            config.update(loaded)
        self._config = cast(configuration.Configuration, config)

    def __save_data(self, config: configuration.Configuration) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(dump(dict(config), Dumper=Dumper))

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def update_config(
        self,
        data_path: Optional[str] = None,
        remove_data_path: bool = False,
        reminder_delay_minutes: Optional[int] = None,
        proximity_radius_km: Optional[float] = None,
        welcome_delay_seconds: Optional[int] = None,
        default_search_radius_km: Optional[float] = None,
        notifications_enabled: Optional[bool] = None,
        log_level: Optional[str] = None,
        last_location: Optional[Coordinate] = None,
        remove_last_location: bool = False,
    ) -> None:
        self.is_dirty = True

        if data_path is not None:
            self.config["data_path"] = data_path
        if remove_data_path:
            self.config["data_path"] = None
        if reminder_delay_minutes is not None:
            self.config["reminder_delay_minutes"] = reminder_delay_minutes
        if proximity_radius_km is not None:
            self.config["proximity_radius_km"] = proximity_radius_km
        if welcome_delay_seconds is not None:
            self.config["welcome_delay_seconds"] = welcome_delay_seconds
        if default_search_radius_km is not None:
            self.config["default_search_radius_km"] = default_search_radius_km
        if notifications_enabled is not None:
            self.config["notifications_enabled"] = notifications_enabled
        if log_level is not None:
            self.config["log_level"] = log_level.upper()
        if last_location is not None:
            self.config["last_location"] = {
                "lat": last_location["lat"],
                "lng": last_location["lng"],
            }
        if remove_last_location:
            self.config["last_location"] = None


CONFIGURATION_REPO = ConfigurationRepository()
