import json
import logging
import os
import tempfile

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value storage kept in a JSON file, like a browser's localStorage.

    With ``path=None`` nothing is written to disk.
    """

    def __init__(self, path=None):
        self.path = path
        self._items = self._read()

    def _read(self):
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding='utf-8') as f:
                items = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Error loading local storage from {self.path}: {e}")
            return {}
        return items if isinstance(items, dict) else {}

    def _write(self):
        if not self.path:
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(self._items, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value):
        self._items[key] = str(value)
        self._write()

    def remove_item(self, key):
        if self._items.pop(key, None) is not None:
            self._write()

    def clear(self):
        self._items = {}
        self._write()

    def __contains__(self, key):
        return key in self._items
