"""JSON file storage for playlist and diff documents.

Every document is a whole Playlist serialized to ``<directory>/<name>``.
Writes go through a temporary sibling file that replaces the target, so a
document is never left half written.
"""

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from playlistpulse.core.schemas import Playlist

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base error for document storage failures."""


class DocumentNotFoundError(StoreError):
    pass


class DocumentReadError(StoreError):
    pass


class JsonPlaylistStore:
    """Reads, writes and deletes named playlist documents in one directory."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path(self, name: str) -> Path:
        return self.directory / name

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    @staticmethod
    def serialize(playlist: Playlist) -> str:
        return playlist.to_json()

    def load(self, name: str) -> Playlist:
        """Load a named document.

        Raises:
            DocumentNotFoundError: the document does not exist.
            DocumentReadError: the document cannot be read or parsed.
        """
        path = self.path(name)
        try:
            data = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise DocumentNotFoundError(f"{path} does not exist") from e
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(f"Could not read {path}: {e}") from e

        try:
            return Playlist.from_json(data)
        except ValidationError as e:
            raise DocumentReadError(f"Could not parse {path}: {e}") from e

    def _write(self, path: Path, data: bytes) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StoreError(f"Could not write {path}: {e}") from e

    def save(self, name: str, playlist: Playlist) -> Path:
        path = self.path(name)
        self._write(path, self.serialize(playlist).encode("utf-8"))
        logger.info("Wrote %d videos to %s", len(playlist.videos), path)
        return path

    def copy(self, name: str, target: str) -> Path:
        """Copy a stored document byte for byte to another name."""
        source = self.path(name)
        try:
            data = source.read_bytes()
        except FileNotFoundError as e:
            raise DocumentNotFoundError(f"{source} does not exist") from e
        except OSError as e:
            raise DocumentReadError(f"Could not read {source}: {e}") from e

        path = self.path(target)
        self._write(path, data)
        logger.info("Copied %s to %s", source, path)
        return path

    def delete(self, name: str) -> None:
        """Remove a named document; missing documents are ignored."""
        path = self.path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError(f"Could not delete {path}: {e}") from e
        logger.info("Deleted %s", path)
