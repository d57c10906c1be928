import json
from pathlib import Path
from typing import Dict, Optional, Protocol


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store; also the fake used in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


def load_store(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return {}
            data = json.loads(content)
            return data if isinstance(data, dict) else {}
    except (json.JSONDecodeError, IOError):
        return {}


def save_store(path: Path, store: Dict[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


class JsonFileStore:
    """Whole-file JSON object of key -> string value, rewritten on every set."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = load_store(self.path).get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        store = load_store(self.path)
        store[key] = value
        save_store(self.path, store)

    def delete(self, key: str) -> None:
        store = load_store(self.path)
        if store.pop(key, None) is not None:
            save_store(self.path, store)


def open_store(path: Optional[Path]) -> KeyValueStore:
    """Pick a store from the path suffix: .db/.sqlite -> SQLite, None -> memory, else JSON."""
    if path is None:
        return MemoryStore()
    path = Path(path)
    if path.suffix in (".db", ".sqlite", ".sqlite3"):
        from .database import SqliteStore
        return SqliteStore(path)
    return JsonFileStore(path)
