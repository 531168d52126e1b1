"""Transient storage for uploaded files while they are being processed."""
from __future__ import annotations

import io
import logging
import re
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Union

from .errors import PayloadTooLargeError, StreamReadError

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
_CHUNK_SIZE = 64 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

Upload = Union[bytes, BinaryIO]


@dataclass(frozen=True)
class TransientFile:
    """Handle to an upload held by a :class:`TransientStore`."""

    key: str
    original_name: str
    size: int


def transient_key(original_name: str) -> str:
    """Build a collision-resistant key that still shows the original file name."""

    safe_name = _UNSAFE_CHARS.sub("_", Path(original_name).name).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}-{safe_name}"


def _iter_chunks(data: Upload):
    if isinstance(data, (bytes, bytearray)):
        data = io.BytesIO(data)
    while True:
        try:
            chunk = data.read(_CHUNK_SIZE)
        except OSError as exc:
            raise StreamReadError(f"Failed to read the upload: {exc}") from exc
        if not chunk:
            return
        yield chunk


class TransientStore:
    max_bytes: Optional[int] = DEFAULT_MAX_UPLOAD_BYTES

    def write(self, data: Upload, *, filename: str) -> TransientFile:
        raise NotImplementedError

    def open(self, handle: TransientFile) -> BinaryIO:
        raise NotImplementedError

    def exists(self, handle: TransientFile) -> bool:
        raise NotImplementedError

    def delete(self, handle: TransientFile) -> None:
        raise NotImplementedError

    def _check_size(self, size: int) -> None:
        if self.max_bytes is not None and size > self.max_bytes:
            raise PayloadTooLargeError(f"The uploaded file exceeds the {self.max_bytes} byte limit")


class LocalTransientStore(TransientStore):
    """Keeps uploads as files below ``root`` until they are deleted."""

    def __init__(self, root: Union[str, Path], *, max_bytes: Optional[int] = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    def _path(self, handle: TransientFile) -> Path:
        return self.root / handle.key

    def write(self, data: Upload, *, filename: str) -> TransientFile:
        self.root.mkdir(parents=True, exist_ok=True)
        key = transient_key(filename)
        path = self.root / key
        size = 0
        try:
            with path.open("xb") as handle:
                for chunk in _iter_chunks(data):
                    size += len(chunk)
                    self._check_size(size)
                    handle.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        LOGGER.debug("Stored upload %s as %s (%s bytes)", filename, path, size)
        return TransientFile(key=key, original_name=filename, size=size)

    def open(self, handle: TransientFile) -> BinaryIO:
        return self._path(handle).open("rb")

    def exists(self, handle: TransientFile) -> bool:
        return self._path(handle).exists()

    def delete(self, handle: TransientFile) -> None:
        self._path(handle).unlink(missing_ok=True)


@dataclass
class InMemoryTransientStore(TransientStore):
    """Dictionary-backed store, mainly for tests and embedding."""

    max_bytes: Optional[int] = DEFAULT_MAX_UPLOAD_BYTES
    _files: Dict[str, bytes] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def write(self, data: Upload, *, filename: str) -> TransientFile:
        buffer = bytearray()
        for chunk in _iter_chunks(data):
            buffer.extend(chunk)
            self._check_size(len(buffer))
        key = transient_key(filename)
        with self._lock:
            self._files[key] = bytes(buffer)
        return TransientFile(key=key, original_name=filename, size=len(buffer))

    def open(self, handle: TransientFile) -> BinaryIO:
        with self._lock:
            return io.BytesIO(self._files[handle.key])

    def exists(self, handle: TransientFile) -> bool:
        with self._lock:
            return handle.key in self._files

    def delete(self, handle: TransientFile) -> None:
        with self._lock:
            self._files.pop(handle.key, None)

    @property
    def keys(self) -> list[str]:
        with self._lock:
            return list(self._files)


__all__ = [
    "DEFAULT_MAX_UPLOAD_BYTES",
    "TransientFile",
    "TransientStore",
    "LocalTransientStore",
    "InMemoryTransientStore",
    "transient_key",
]
