"""
paths — нормализация путей и построение ключей хранилища.

Правила:
- путь пользователя '/'-разделённый, регистрозависимый, относительный к префиксу
- нормальная форма: без ведущих/хвостовых '/', без сегментов '.' и '..'
- пустая строка — корень файловой системы (всегда каталог)
- '..' не поднимается выше корня, поэтому ключ никогда не выходит за префикс
"""

from __future__ import annotations

import posixpath

DELIMITER = "/"


def normalize(path: str) -> str:
    """Приводит путь к нормальной форме. Без I/O, никогда не падает."""
    if path is None:
        return ""
    # ведущий '/' привязывает '..' к корню
    cleaned = posixpath.normpath(DELIMITER + str(path))
    return cleaned.lstrip(DELIMITER)


def with_prefix(prefix: str, *names: str) -> str:
    """Склеивает настроенный префикс с сегментами и нормализует результат.

    Пустой результат означает корень и не является ключом объекта.
    """
    # каждый сегмент нормализуется отдельно: '..' в пути не съедает префикс
    parts = [normalize(p) for p in (prefix, *names)]
    return DELIMITER.join(p for p in parts if p)


def base_name(key: str) -> str:
    """Последний сегмент ключа или common prefix ('a/b/' -> 'b')."""
    return key.rstrip(DELIMITER).rsplit(DELIMITER, 1)[-1]


def parents(path: str) -> list[str]:
    """Предки нормализованного пути, от внешнего к внутреннему ('a/b/c' -> ['a', 'a/b'])."""
    segments = normalize(path).split(DELIMITER)
    return [DELIMITER.join(segments[:i]) for i in range(1, len(segments))]
