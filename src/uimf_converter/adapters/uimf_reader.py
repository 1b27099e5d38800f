"""SQLite-backed reader for ``.uimf`` files implementing the UimfReader port."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from types import TracebackType

from uimf_converter.application.results import FrameRecord
from uimf_converter.errors import UimfReadError

logger = logging.getLogger(__name__)

FRAME_TYPE_PARAM = "FrameType"
ENCODING_SEQUENCE_PARAM = "MultiplexingEncodingSequence"
# Legacy Frame_Parameters stored the encoding sequence as the IMF profile name.
LEGACY_ENCODING_SEQUENCE_COLUMN = "IMFProfile"


class SqliteUimfReader:
    """Read frames and scans from a ``.uimf`` file.

    Newer files keep frame metadata as key/value rows in ``Frame_Params``
    (names in ``Frame_Param_Keys``); older files use the wide
    ``Frame_Parameters`` table. Spectrum point counts come from the
    ``NonZeroCount`` column of ``Frame_Scans``, which holds the number of
    non-zero bins of the decoded spectrum.
    """

    def __init__(self, uimf_path: Path) -> None:
        self.uimf_path = Path(uimf_path)
        self._conn: sqlite3.Connection | None = None

    def open(self) -> None:
        if not self.uimf_path.is_file():
            raise UimfReadError(f"UIMF file not found: {self.uimf_path}")
        uri = f"{self.uimf_path.resolve().as_uri()}?mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise UimfReadError(f"Unable to open {self.uimf_path}: {exc}") from exc

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SqliteUimfReader:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def frames(self) -> list[FrameRecord]:
        """Return all frames ordered by frame number.

        Returns
        -------
        list[FrameRecord]
            One record per frame; ``encoding_sequence`` is ``""`` when the
            file does not store one.

        Raises
        ------
        UimfReadError
            If the file has no frame table or cannot be queried.
        """
        if self._has_table("Frame_Params") and self._has_table("Frame_Param_Keys"):
            return self._frames_from_param_rows()
        if self._has_table("Frame_Parameters"):
            return self._frames_from_legacy_table()
        raise UimfReadError(f"{self.uimf_path.name} has no frame parameter table")

    def frame_scans(self, frame_number: int) -> list[int]:
        rows = self._query(
            "SELECT ScanNum FROM Frame_Scans WHERE FrameNum = ? ORDER BY ScanNum",
            (frame_number,),
        )
        return [int(row[0]) for row in rows]

    def spectrum_point_count(
        self, frame_number: int, frame_type: int, scan: int
    ) -> int:
        del frame_type
        rows = self._query(
            "SELECT NonZeroCount FROM Frame_Scans WHERE FrameNum = ? AND ScanNum = ?",
            (frame_number, scan),
        )
        if not rows or rows[0][0] is None:
            return 0
        return int(rows[0][0])

    def _frames_from_param_rows(self) -> list[FrameRecord]:
        rows = self._query(
            """
            SELECT P.FrameNum, K.ParamName, P.ParamValue
            FROM Frame_Params P
            INNER JOIN Frame_Param_Keys K ON P.ParamID = K.ParamID
            WHERE K.ParamName IN (?, ?)
            """,
            (FRAME_TYPE_PARAM, ENCODING_SEQUENCE_PARAM),
        )
        frame_numbers = self._query("SELECT DISTINCT FrameNum FROM Frame_Params")
        values: dict[int, dict[str, str]] = {int(row[0]): {} for row in frame_numbers}
        for frame_number, name, value in rows:
            values.setdefault(int(frame_number), {})[name] = (
                "" if value is None else str(value)
            )
        return [
            FrameRecord(
                frame_number=frame_number,
                frame_type=_to_frame_type(params.get(FRAME_TYPE_PARAM)),
                encoding_sequence=params.get(ENCODING_SEQUENCE_PARAM, ""),
            )
            for frame_number, params in sorted(values.items())
        ]

    def _frames_from_legacy_table(self) -> list[FrameRecord]:
        columns = {
            row[1] for row in self._query("PRAGMA table_info(Frame_Parameters)")
        }
        sequence_column = (
            LEGACY_ENCODING_SEQUENCE_COLUMN
            if LEGACY_ENCODING_SEQUENCE_COLUMN in columns
            else "''"
        )
        rows = self._query(
            f"SELECT FrameNum, FrameType, {sequence_column} "
            "FROM Frame_Parameters ORDER BY FrameNum"
        )
        return [
            FrameRecord(
                frame_number=int(frame_number),
                frame_type=_to_frame_type(frame_type),
                encoding_sequence="" if sequence is None else str(sequence),
            )
            for frame_number, frame_type, sequence in rows
        ]

    def _has_table(self, name: str) -> bool:
        rows = self._query(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            (name,),
        )
        return bool(rows)

    def _query(self, sql: str, params: tuple[object, ...] = ()) -> list[tuple]:
        if self._conn is None:
            raise UimfReadError("UIMF reader is not open.")
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise UimfReadError(
                f"Error querying {self.uimf_path.name}: {exc}"
            ) from exc


def _to_frame_type(raw: object) -> int:
    try:
        return int(raw) if raw not in (None, "") else 0
    except (TypeError, ValueError):
        logger.debug("Unrecognized frame type %r; treating as 0", raw)
        return 0


def open_uimf_reader(uimf_path: Path) -> SqliteUimfReader:
    """Default ``UimfReaderFactory``: the reader opens on ``__enter__``."""
    return SqliteUimfReader(uimf_path)
