# ABOUTME: Per-device reading progress: a per-chapter log plus a last-write-wins pointer per novel.
# ABOUTME: Derives continue points, completion summaries, read maps, and reading history.

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from novelshelf.db.schema import NOW
from novelshelf.db.store import NovelStore

# A chapter counts as read once its logged position reaches this fraction.
READ_THRESHOLD = 0.9


@dataclass
class ContinuePoint:
    chapter_id: int
    position_pct: float


@dataclass
class ProgressSummary:
    """How far a device has got through a novel.

    ``percent`` is ``last_read_seq / total_chapters`` clamped to [0, 1], and
    0 when the novel has no chapters.
    """

    total_chapters: int
    last_read_seq: int
    percent: float


@dataclass
class HistoryEntry:
    """A novel this device has opened, with where it last was."""

    novel_id: int
    title: str
    author: str | None
    cover_path: str | None
    chapter_id: int
    position_pct: float
    last_seq: int
    chapter_count: int
    last_read_at: int

    @property
    def overall_percent(self) -> float:
        """Chapters before the current one plus the position inside it, over the total."""
        if self.chapter_count <= 0:
            return 0.0
        within = _clamp(self.position_pct)
        overall = (max(0, self.last_seq - 1) + within) / self.chapter_count
        return _clamp(overall)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


def _row_to_history(row: Any) -> HistoryEntry:
    return HistoryEntry(
        novel_id=row["novel_id"],
        title=row["title"],
        author=row["author"],
        cover_path=row["cover_path"],
        chapter_id=row["chapter_id"],
        position_pct=row["position_pct"],
        last_seq=row["last_seq"] or 0,
        chapter_count=row["chapter_count"] or 0,
        last_read_at=row["last_read_at"],
    )


class ReadingProgressTracker:
    """Reads and writes reading progress for one store.

    Two records are kept per device. The log (reading_progress) holds one
    position per chapter. The pointer (reading_state) holds the single chapter
    and position the device last saved in each novel, even if that moves it
    backward. The two can disagree: re-reading chapter 2 after finishing
    chapter 5 leaves the pointer on 2 while the log still records 5.
    """

    def __init__(self, store: NovelStore) -> None:
        self._store = store

    def save_progress(
        self, novel_id: int, chapter_id: int, position_pct: float, device_id: str
    ) -> None:
        """Record a position, clamped to [0, 1], in both the log and the pointer.

        Raises:
            ConstraintViolation: If the novel or chapter does not exist.
        """
        pct = _clamp(position_pct)

        with self._store.transaction():
            self._store.execute(
                "INSERT INTO reading_progress "
                "(novel_id, chapter_id, position_pct, device_id, created_at, updated_at) "
                f"VALUES (?, ?, ?, ?, {NOW}, {NOW}) "
                "ON CONFLICT(chapter_id, device_id) DO UPDATE SET "
                "position_pct = excluded.position_pct, "
                f"updated_at = {NOW}",
                (novel_id, chapter_id, pct, device_id),
            )
            self._store.execute(
                "INSERT INTO reading_state "
                "(novel_id, chapter_id, position_pct, device_id, updated_at) "
                f"VALUES (?, ?, ?, ?, {NOW}) "
                "ON CONFLICT(novel_id, device_id) DO UPDATE SET "
                "chapter_id = excluded.chapter_id, "
                "position_pct = excluded.position_pct, "
                f"updated_at = {NOW}",
                (novel_id, chapter_id, pct, device_id),
            )

    def get_continue_point(self, novel_id: int, device_id: str) -> ContinuePoint | None:
        """Where this device last was in the novel, or None if it never opened it."""
        row = self._store.select_one(
            "SELECT chapter_id, position_pct FROM reading_state "
            "WHERE novel_id = ? AND device_id = ?",
            (novel_id, device_id),
        )
        return ContinuePoint(row["chapter_id"], row["position_pct"]) if row else None

    def get_furthest_progress(self, novel_id: int, device_id: str) -> ContinuePoint | None:
        """The most recently updated log row for this novel and device."""
        row = self._store.select_one(
            "SELECT chapter_id, position_pct FROM reading_progress "
            "WHERE novel_id = ? AND device_id = ? "
            "ORDER BY updated_at DESC, id DESC LIMIT 1",
            (novel_id, device_id),
        )
        return ContinuePoint(row["chapter_id"], row["position_pct"]) if row else None

    def get_summary(self, novel_id: int, device_id: str) -> ProgressSummary:
        """Completion of a novel for one device.

        The last-read chapter comes from the pointer. Only when the device has
        no pointer does it fall back to the highest chapter seq in the log.
        """
        total_row = self._store.select_one(
            "SELECT COUNT(*) AS n FROM chapters WHERE novel_id = ?", (novel_id,)
        )
        total = total_row["n"] if total_row else 0

        pointer = self._store.select_one(
            "SELECT c.seq AS seq FROM reading_state rs "
            "JOIN chapters c ON c.id = rs.chapter_id "
            "WHERE rs.novel_id = ? AND rs.device_id = ?",
            (novel_id, device_id),
        )
        if pointer is not None:
            last_seq = pointer["seq"]
        else:
            logged = self._store.select_one(
                "SELECT MAX(c.seq) AS max_seq FROM reading_progress rp "
                "JOIN chapters c ON c.id = rp.chapter_id "
                "WHERE rp.novel_id = ? AND rp.device_id = ?",
                (novel_id, device_id),
            )
            last_seq = logged["max_seq"] if logged and logged["max_seq"] is not None else 0

        percent = _clamp(last_seq / total) if total else 0.0
        return ProgressSummary(total_chapters=total, last_read_seq=last_seq, percent=percent)

    def get_read_map(self, chapter_ids: Iterable[int], device_id: str) -> set[int]:
        """The chapters among chapter_ids this device has read to READ_THRESHOLD."""
        ids = list(dict.fromkeys(chapter_ids))
        if not ids:
            return set()

        placeholders = ", ".join("?" for _ in ids)
        rows = self._store.select(
            "SELECT chapter_id FROM reading_progress "
            "WHERE device_id = ? AND position_pct >= ? "
            f"AND chapter_id IN ({placeholders})",
            (device_id, READ_THRESHOLD, *ids),
        )
        return {row["chapter_id"] for row in rows}

    def list_history(self, device_id: str, limit: int | None = None) -> list[HistoryEntry]:
        """Every novel this device has a pointer for, most recently read first."""
        sql = (
            "SELECT n.id AS novel_id, n.title, n.author, n.cover_path, "
            "rs.chapter_id, rs.position_pct, c.seq AS last_seq, "
            "IFNULL(ns.chapter_count, 0) AS chapter_count, rs.updated_at AS last_read_at "
            "FROM reading_state rs "
            "JOIN novels n ON n.id = rs.novel_id "
            "LEFT JOIN chapters c ON c.id = rs.chapter_id "
            "LEFT JOIN novel_stats ns ON ns.novel_id = n.id "
            "WHERE rs.device_id = ? "
            "ORDER BY rs.updated_at DESC, n.id DESC"
        )
        params: list[Any] = [device_id]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [_row_to_history(row) for row in self._store.select(sql, params)]
