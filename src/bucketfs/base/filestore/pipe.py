"""
pipe — ограниченный канал с буфером на диске между фоновой передачей и вызывающим.

Назначение:
- развязать сетевую передачу (фоновый поток) и синхронные read/write вызывающего
- ограничить память и диск независимо от размера объекта

Устройство:
- буфер — анонимный временный файл, используемый как кольцо из capacity байт
- непрочитанных байт никогда не больше capacity: писатель блокируется, пока
  читатель не освободит место (backpressure), читатель — пока нет данных
- ошибка, с которой закрыт один конец, доставляется другому концу:
  читателю — после того, как он дочитал уже записанные данные
- временный файл освобождается, когда закрыты оба конца

Важно:
- весь дисковый I/O идёт под общим замком, поэтому закрытие с любой стороны безопасно
- write_at допускает только строго последовательную запись (см. write_at)
"""

from __future__ import annotations

import threading

from bucketfs.base.filestore.errors import InvalidOperationError, PipeClosedError
from bucketfs.base.filestore.tmp import scratch_file


class Pipe:
    """Канал один писатель -> один читатель с кольцевым буфером на диске."""

    def __init__(self, capacity: int, scratch_dir: str | None = None):
        if capacity <= 0:
            raise ValueError(f"pipe capacity must be positive, got {capacity}")
        self._capacity = int(capacity)
        self._file = scratch_file(scratch_dir)
        self._cond = threading.Condition()

        self._written = 0
        self._consumed = 0

        self._writer_closed = False
        self._writer_error: BaseException | None = None
        self._reader_closed = False
        self._reader_error: BaseException | None = None

        self.reader = PipeReader(self)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def written(self) -> int:
        return self._written

    @property
    def consumed(self) -> int:
        return self._consumed

    @property
    def released(self) -> bool:
        return self._file.closed

    # --- Запись ---

    def write(self, data: bytes) -> int:
        """Пишет data целиком, блокируясь, пока в кольце нет места."""
        view = memoryview(data).cast("B")
        total = len(view)
        with self._cond:
            while view:
                self._check_writable()
                if self._written - self._consumed >= self._capacity:
                    self._cond.wait()
                    continue
                n = self._put(view)
                view = view[n:]
        return total

    def write_at(self, data: bytes, offset: int) -> int:
        """Пишет data по смещению offset.

        Допустимо только offset == текущей позиции потока: смещение позади неё
        означает перекрытие, впереди — дыру, которую некому заполнить.
        """
        with self._cond:
            self._check_writable()
            if offset != self._written:
                where = "behind" if offset < self._written else "ahead of"
                raise InvalidOperationError(
                    f"write at offset {offset} is {where} stream position {self._written}"
                )
            # Condition поверх RLock, повторный вход разрешён
            return self.write(data)

    def close_writer(self, error: BaseException | None = None) -> None:
        """Закрывает конец записи: EOF для читателя или ошибка error."""
        with self._cond:
            if self._writer_closed:
                return
            self._writer_closed = True
            self._writer_error = error
            self._cond.notify_all()
            self._release_if_done()

    def _check_writable(self) -> None:
        if self._reader_closed:
            if self._reader_error is not None:
                raise self._reader_error
            raise PipeClosedError("read end of pipe is closed")
        if self._writer_closed:
            raise PipeClosedError("write on closed pipe")

    def _put(self, view: memoryview) -> int:
        # вызывается под замком
        free = self._capacity - (self._written - self._consumed)
        pos = self._written % self._capacity
        n = min(len(view), free, self._capacity - pos)
        self._file.seek(pos)
        self._file.write(view[:n])
        self._written += n
        self._cond.notify_all()
        return n

    # --- Чтение ---

    def readinto(self, b) -> int:
        """Читает доступные байты в b; 0 — только на EOF."""
        view = memoryview(b).cast("B")
        if not len(view):
            return 0
        with self._cond:
            while True:
                if self._reader_closed:
                    raise PipeClosedError("read on closed pipe")
                if self._written > self._consumed:
                    break
                if self._writer_closed:
                    if self._writer_error is not None:
                        raise self._writer_error
                    return 0
                self._cond.wait()

            avail = self._written - self._consumed
            pos = self._consumed % self._capacity
            n = min(len(view), avail, self._capacity - pos)
            self._file.flush()
            self._file.seek(pos)
            got = self._file.readinto(view[:n])
            self._consumed += got
            self._cond.notify_all()
            return got

    def read(self, size: int = -1) -> bytes:
        """Читает ровно size байт (меньше — только на EOF); size < 0 — до EOF."""
        if size is None or size < 0:
            chunks: list[bytes] = []
            while True:
                chunk = self.read(self._capacity)
                if not chunk:
                    break
                chunks.append(chunk)
            return b"".join(chunks)

        buf = bytearray(size)
        filled = 0
        with memoryview(buf) as view:
            while filled < size:
                n = self.readinto(view[filled:])
                if n == 0:
                    break
                filled += n
        del buf[filled:]
        return bytes(buf)

    def close_reader(self, error: BaseException | None = None) -> None:
        """Закрывает конец чтения; дальнейшая запись получит error или PipeClosedError."""
        with self._cond:
            if self._reader_closed:
                return
            self._reader_closed = True
            self._reader_error = error
            self._cond.notify_all()
            self._release_if_done()

    # --- Общее ---

    def close(self) -> None:
        self.close_writer()
        self.close_reader()

    def _release_if_done(self) -> None:
        if self._writer_closed and self._reader_closed and not self._file.closed:
            self._file.close()


class PipeReader:
    """
    Файлоподобный конец чтения канала.

    read(n) возвращает ровно n байт, если не достигнут EOF: multipart-загрузке
    нужны полные части, короткое чтение дало бы слишком маленькую часть.
    """

    def __init__(self, pipe: Pipe):
        self._pipe = pipe

    def read(self, size: int = -1) -> bytes:
        return self._pipe.read(size)

    def readinto(self, b) -> int:
        return self._pipe.readinto(b)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def close(self) -> None:
        self._pipe.close_reader()
