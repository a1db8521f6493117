# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import NotRequired, Optional, TypedDict

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]
import platformdirs

from geonotes.model.location import Coordinate

APP_NAME = "geonotes"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

# These will be set dynamically by load_data_path_configuration()
DATA_PATH: Path = platformdirs.user_data_path(APP_NAME)


class Configuration(TypedDict):
    data_path: Optional[str]
    reminder_delay_minutes: int
    proximity_radius_km: float
    welcome_delay_seconds: int
    default_search_radius_km: float
    notifications_enabled: bool
    log_level: str
    last_location: NotRequired[Optional[Coordinate]]


def get_default_config() -> Configuration:
    return {
        "data_path": None,
        "reminder_delay_minutes": 60,
        "proximity_radius_km": 0.1,
        "welcome_delay_seconds": 2,
        "default_search_radius_km": 1.0,
        "notifications_enabled": False,
        "log_level": "WARNING",
        "last_location": None,
    }


def load_data_path_configuration() -> None:
    """
    Load the configuration and set DATA_PATH dynamically.

    This must be called after the config file exists and before any
    repositories are instantiated.
    """
    global DATA_PATH

    if not APP_CONFIG_PATH.is_file():
        # Config doesn't exist yet, use defaults
        return

    config: Optional[Configuration] = load(APP_CONFIG_PATH.read_text(), Loader=Loader)
    if config is None:
        return

    data_path_setting = config.get("data_path")
    if data_path_setting is not None:
        DATA_PATH = Path(data_path_setting).expanduser()
