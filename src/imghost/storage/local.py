from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import AsyncIterator, BinaryIO

from starlette.concurrency import run_in_threadpool

from imghost.exceptions import StorageError, StoredFileNotFound, UploadTooLarge
from imghost.storage.naming import DEFAULT_NAME_LENGTH, random_filename

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Flat directory of uploaded files named `<random>.<ext>`.

    The directory listing is the only state. New files are created with
    exclusive-create, so a clashing random name is redrawn instead of
    overwriting an earlier upload.
    """

    def __init__(
        self,
        base_path: str | os.PathLike[str],
        *,
        name_length: int = DEFAULT_NAME_LENGTH,
        name_attempts: int = 8,
    ):
        self.base_path = Path(base_path)
        self.name_length = name_length
        self.name_attempts = name_attempts

    def ensure_dir(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    def resolve(self, name: str) -> Path:
        """Map a requested name to a stored file; only the last segment counts."""
        base = PurePosixPath(name.replace("\\", "/")).name
        if base in ("", ".", ".."):
            raise StoredFileNotFound()
        path = self.base_path / base
        if not path.is_file():
            raise StoredFileNotFound()
        return path

    def exists(self, name: str) -> bool:
        try:
            self.resolve(name)
        except StoredFileNotFound:
            return False
        return True

    def _reserve(self, original: str | None, fallback_ext: str) -> tuple[str, BinaryIO]:
        for _ in range(self.name_attempts):
            name = random_filename(self.name_length, original, fallback_ext=fallback_ext)
            try:
                fh = open(self.base_path / name, "xb")
            except FileExistsError:
                logger.warning("Generated name %s already taken, drawing again", name)
                continue
            except OSError as exc:
                raise StorageError("Error creating the file") from exc
            return name, fh
        raise StorageError("Error creating the file: no free name")

    def _discard(self, name: str) -> None:
        try:
            (self.base_path / name).unlink(missing_ok=True)
        except OSError:
            logger.exception("Could not remove partial upload %s", name)

    async def save(
        self,
        original: str | None,
        head: bytes,
        rest: AsyncIterator[bytes],
        *,
        max_bytes: int,
        fallback_ext: str = "",
    ) -> str:
        """
        Write `head` followed by `rest` under a fresh name and return that name.

        Exceeding `max_bytes` raises UploadTooLarge. On any failure the
        partially written file is removed before the error propagates.
        """
        if len(head) > max_bytes:
            raise UploadTooLarge()

        name, fh = await run_in_threadpool(self._reserve, original, fallback_ext)
        written = 0
        try:
            try:
                await run_in_threadpool(fh.write, head)
                written = len(head)
                async for chunk in rest:
                    written += len(chunk)
                    if written > max_bytes:
                        raise UploadTooLarge()
                    await run_in_threadpool(fh.write, chunk)
            finally:
                await run_in_threadpool(fh.close)
        except OSError as exc:
            self._discard(name)
            raise StorageError("Error copying file data") from exc
        except BaseException:
            self._discard(name)
            raise

        logger.info("Stored %s (%d bytes)", name, written, extra={"stored_name": name})
        return name
