"""
bridge — потоковые мосты между фоновой сетевой передачей и синхронным I/O.

ReadBridge:
- фоновый поток делает ranged fetch объекта с offset и льёт тело в Pipe
- вызывающий читает из Pipe; память ограничена ёмкостью канала
- ошибка передачи доставляется на ближайшем чтении, после уже полученных данных

WriteBridge:
- фоновый поток отдаёт хранилищу конец чтения канала (multipart-загрузка)
- вызывающий пишет в канал; запись блокируется, пока сеть не заберёт данные
- объект фиксируется только при close(); abort() гарантирует, что загрузка не завершится

Важно:
- один мост обслуживает один непрерывный поток; seek = новый ReadBridge
- конкурентные вызовы на одном мосту не поддерживаются
"""

from __future__ import annotations

import errno
import logging
import threading

from bucketfs.base.filestore.errors import PipeClosedError
from bucketfs.base.filestore.pipe import Pipe
from bucketfs.base.objstore.base import ObjectStore

logger = logging.getLogger(__name__)

_COPY_CHUNK = 256 * 1024


class ReadBridge:
    """Поток чтения объекта key начиная с offset."""

    def __init__(
        self,
        store: ObjectStore,
        key: str,
        offset: int,
        size: int,
        *,
        part_size: int,
        scratch_dir: str | None = None,
    ):
        self._store = store
        self._key = key
        self._offset = offset
        self._expected = max(size - offset, 0)
        self._pipe = Pipe(part_size, scratch_dir)
        self._thread: threading.Thread | None = None

        if offset >= size:
            # за концом объекта запрос не нужен: сразу EOF
            self._pipe.close_writer()
            return

        self._thread = threading.Thread(
            target=self._run,
            name=f"bucketfs-read:{key}",
            daemon=True,
        )
        self._thread.start()

    @property
    def offset(self) -> int:
        return self._offset

    def _run(self) -> None:
        logger.debug("read transfer start key=%s offset=%s", self._key, self._offset)
        try:
            body = self._store.get_object(self._key, offset=self._offset)
        except Exception as e:
            logger.debug("read transfer failed key=%s: %r", self._key, e)
            self._pipe.close_writer(e)
            return

        copied = 0
        try:
            while True:
                chunk = body.read(_COPY_CHUNK)
                if not chunk:
                    break
                self._pipe.write(chunk)
                copied += len(chunk)
            if copied < self._expected:
                raise OSError(
                    errno.EIO,
                    f"short read: expected {self._expected} bytes, got {copied}",
                    self._key,
                )
        except PipeClosedError:
            logger.debug("read transfer cancelled key=%s after %s bytes", self._key, copied)
            self._pipe.close_writer()
        except Exception as e:
            logger.debug("read transfer failed key=%s: %r", self._key, e)
            self._pipe.close_writer(e)
        else:
            logger.debug("read transfer done key=%s bytes=%s", self._key, copied)
            self._pipe.close_writer()
        finally:
            body.close()

    def readinto(self, b) -> int:
        return self._pipe.readinto(b)

    def close(self) -> None:
        """Отменяет передачу; поток остановится на следующей записи в канал."""
        self._pipe.close_reader()


class WriteBridge:
    """Поток загрузки объекта key."""

    def __init__(
        self,
        store: ObjectStore,
        key: str,
        *,
        part_size: int,
        scratch_dir: str | None = None,
    ):
        self._store = store
        self._key = key
        self._part_size = part_size
        self._pipe = Pipe(part_size, scratch_dir)
        self._error: BaseException | None = None
        self._closed = False

        self._thread = threading.Thread(
            target=self._run,
            name=f"bucketfs-write:{key}",
            daemon=True,
        )
        self._thread.start()

    @property
    def written(self) -> int:
        return self._pipe.written

    def _run(self) -> None:
        logger.debug("write transfer start key=%s part_size=%s", self._key, self._part_size)
        try:
            self._store.put_object(self._key, self._pipe.reader, part_size=self._part_size)
        except Exception as e:
            logger.debug("write transfer failed key=%s: %r", self._key, e)
            self._error = e
            self._pipe.close_reader(e)
        else:
            logger.debug("write transfer done key=%s bytes=%s", self._key, self._pipe.consumed)
            self._pipe.close_reader()

    def write(self, data) -> int:
        return self._pipe.write(data)

    def write_at(self, data, offset: int) -> int:
        return self._pipe.write_at(data, offset)

    def close(self) -> None:
        """Завершает поток, ждёт фиксации объекта и пробрасывает ошибку передачи."""
        if self._closed:
            return
        self._closed = True
        self._pipe.close_writer()
        self._thread.join()
        if self._error is not None:
            raise self._error

    def abort(self, wait: bool = False) -> None:
        """Обрывает загрузку: хранилище получает ошибку чтения и объект не фиксируется."""
        if self._closed:
            return
        self._closed = True
        logger.debug("write transfer aborted key=%s", self._key)
        self._pipe.close_writer(PipeClosedError("upload aborted"))
        if wait:
            self._thread.join()
