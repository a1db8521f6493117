# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, Protocol

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Key-value persistence holding JSON-serializable values."""

    def load(self, key: str) -> Optional[Any]: ...

    def save(self, key: str, value: Any) -> None: ...


class MemoryBackend:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def load(self, key: str) -> Optional[Any]:
        if key not in self._values:
            return None
        return deepcopy(self._values[key])

    def save(self, key: str, value: Any) -> None:
        self._values[key] = deepcopy(value)


class YamlFileBackend:
    """Stores every key as its own YAML file under a data directory."""

    def __init__(self, data_path: Path) -> None:
        self.data_path = data_path

    def _path_for(self, key: str) -> Path:
        return self.data_path / f"{key}.yaml"

    def load(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.is_file():
            return None
        return load(path.read_text(encoding="utf-8"), Loader=Loader)

    def save(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write next to the target then rename so a crash never leaves half a file
        tmp_path = path.with_suffix(".yaml.tmp")
        tmp_path.write_text(
            dump(value, Dumper=Dumper, allow_unicode=True), encoding="utf-8"
        )
        tmp_path.replace(path)
        logger.debug("saved %s", path)
