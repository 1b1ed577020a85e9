"""
File based store for cache bodies.

Each body lives in ``<directory>/<uid>.html``. Writes go to a temporary file in
the same directory and are renamed into place, so a reader never sees a
partially written body. The body's modification time is its write timestamp
and drives expiry.
"""

import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Iterator

from htmlcache.exceptions import CacheBodyNotFound, WriteError

logger = logging.getLogger(__name__)


class CacheStore:
    """
    Maps an opaque cache entry uid to a response body blob.

    Example Usage:
        >>> store = CacheStore("/var/app/storage/runtime/htmlcache")
        >>> store.put(uid, b"<html>A</html>")
        >>> store.get(uid)
        b'<html>A</html>'
        >>> store.age_seconds(uid)
        0
        >>> store.delete(uid)
    """

    BODY_SUFFIX = ".html"
    TEMP_SUFFIX = ".tmp"

    def __init__(self, directory):
        self.directory = Path(directory)

    def put(self, uid, body: bytes) -> None:
        """
        Persist ``body`` under ``uid``, replacing any previous body.

        Raises:
            WriteError: If the directory or file cannot be written
        """
        target = self._path_for(uid)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self.directory,
                prefix=f".{target.stem}.",
                suffix=self.TEMP_SUFFIX,
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(body)
                os.replace(temp_name, target)
            except BaseException:
                try:
                    os.unlink(temp_name)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise WriteError(f"Could not write cache body {target}: {e}") from e

        logger.debug(f"Cache body written - operation=put, uid={uid}, size={len(body)}")

    def get(self, uid) -> bytes:
        """
        Return the body stored under ``uid``.

        Raises:
            CacheBodyNotFound: If no body is stored
        """
        try:
            return self._path_for(uid).read_bytes()
        except FileNotFoundError as e:
            raise CacheBodyNotFound(uid) from e

    def delete(self, uid) -> None:
        """Remove the body stored under ``uid``; missing bodies are ignored."""
        self._path_for(uid).unlink(missing_ok=True)
        logger.debug(f"Cache body deleted - operation=delete, uid={uid}")

    def exists(self, uid) -> bool:
        return self._path_for(uid).is_file()

    def age_seconds(self, uid) -> int:
        """
        Whole seconds elapsed since the body for ``uid`` was written.

        Raises:
            CacheBodyNotFound: If no body is stored
        """
        try:
            modified = self._path_for(uid).stat().st_mtime
        except FileNotFoundError as e:
            raise CacheBodyNotFound(uid) from e
        return max(0, int(time.time() - modified))

    def clear_all(self) -> int:
        """
        Remove every stored body (and leftover temporary files).

        Other files in the directory, such as the ``settings.json`` sidecar,
        are left alone.

        Returns:
            Number of bodies removed
        """
        if not self.directory.is_dir():
            return 0

        removed = 0
        for path in self.directory.glob(f"*{self.BODY_SUFFIX}"):
            path.unlink(missing_ok=True)
            removed += 1
        for path in self.directory.glob(f".*{self.TEMP_SUFFIX}"):
            path.unlink(missing_ok=True)

        logger.info(f"Cache bodies cleared - operation=clear_all, removed={removed}")
        return removed

    def iter_uids(self) -> Iterator[str]:
        """Yield the uid of every stored body; files not named after a uid are skipped."""
        if not self.directory.is_dir():
            return
        for path in self.directory.glob(f"*{self.BODY_SUFFIX}"):
            try:
                uid = self._validate_uid(path.stem)
            except ValueError:
                logger.debug(f"Cache store skipped foreign file - operation=iter_uids, path={path}")
                continue
            yield uid

    def _path_for(self, uid) -> Path:
        return self.directory / f"{self._validate_uid(uid)}{self.BODY_SUFFIX}"

    @staticmethod
    def _validate_uid(uid) -> str:
        """
        Return ``uid`` in canonical form.

        Raises:
            ValueError: If uid is not a UUID (keeps paths inside the directory)
        """
        try:
            return str(uuid.UUID(str(uid)))
        except ValueError:
            raise ValueError(f"uid must be a UUID, got: {uid!r}") from None
