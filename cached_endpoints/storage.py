from abc import ABC, abstractmethod
import hashlib
import logging
import os
from pathlib import Path
import tempfile
import threading
from typing import Dict, Optional

from .util import clamp


logger = logging.getLogger(__name__)


class Storage(ABC):
    """
    An abstraction of a string key-value store.

    Storage knows nothing about responses or expiry. It only has to remember a string under a key for at least as long
    as the process lives, and to be safe to call from several threads at once.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value stored under `key`.

        @param key
          An opaque key.
        @return
          The stored value, or `None` if nothing is stored under `key`.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store `value` under `key`, replacing whatever was there.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Forget the value stored under `key`. Deleting a missing key does nothing.
        """

    def close(self):
        """
        Close any resources associated with the storage.
        """


class MemoryStorage(Storage):
    """
    Keeps values in a dictionary for the lifetime of the process.
    """

    def __init__(self) -> None:
        self.__values = {}  # type: Dict[str, str]
        self.__lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self.__lock:
            return self.__values.get(key)

    def set(self, key: str, value: str) -> None:
        with self.__lock:
            self.__values[key] = value

    def delete(self, key: str) -> None:
        with self.__lock:
            self.__values.pop(key, None)

    def __len__(self) -> int:
        with self.__lock:
            return len(self.__values)


class FileStorage(Storage):
    def __init__(self, directory: Path, directory_levels: int = 2) -> None:
        """
        Initialize the file storage.

        @param directory
          The path to the root directory of the storage.
        @param directory_levels
          The number of subdirectory levels to use in the storage directory. This
          will be clamped to be between 0 and 20, respectively.
        """
        self.__directory = Path(directory)
        self.__directory_levels = clamp(directory_levels, 0, 20)

    def _get_path(self, key: str) -> Path:
        hashed = hashlib.sha256(key.encode('utf-8')).hexdigest()
        return self.__directory / self._split_path(hashed)

    def _split_path(self, path: str) -> Path:
        subdirectories = (list(path[:self.__directory_levels])
                          + [path[self.__directory_levels:]])
        return Path(*subdirectories)

    def get(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            logger.info('No value stored at {}'.format(path))
            return None

    def set(self, key: str, value: str) -> None:
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write beside the target and rename, so readers only ever see a complete file.
        fd, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix='.tmp-')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(temp_name, str(path))
        except BaseException:
            logger.exception('Unexpected error occurred while writing {}'.format(path))
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
        logger.info('Stored value at {}'.format(path))

    def delete(self, key: str) -> None:
        path = self._get_path(key)
        try:
            logger.info('Deleting {}'.format(path))
            path.unlink()
        except FileNotFoundError:
            logger.info('Nothing stored at {}. Nothing to delete.'.format(path))
