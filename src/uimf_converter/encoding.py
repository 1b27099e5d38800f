"""Determine whether a dataset is multiplexed and its encoding bit width."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path, PureWindowsPath

from uimf_converter.adapters.uimf_reader import open_uimf_reader
from uimf_converter.application.options import ACQ_DATA_DIRECTORY
from uimf_converter.application.ports import UimfReaderFactory
from uimf_converter.application.results import EncodingResult

logger = logging.getLogger(__name__)

# Encoding sequence file names start with the bit width: 3bit_..., 4bit_...
_SEQUENCE_BIT_RE = re.compile(r"^(\d)bit", re.IGNORECASE)
# Older files only carry the bit width in the dataset name, e.g.
# BSA_65min_0pt5uL_1pt5ms_4bit_0001 or BSA_65min_0pt5uL_1pt5ms_4bit
_FILENAME_BIT_RE = re.compile(r"_(\d)bit_|_(\d)bit$", re.IGNORECASE)

IMS_FRAME_METHOD_FILE = "IMSFrameMeth.xml"
# ImsMuxProcessing 1 means 'None'; 2 (RealTime) and 3 (PostRun) mean the data
# was already demultiplexed.
MUX_PROCESSING_NONE = 1


def _sequence_file_name(encoding_sequence: str) -> str:
    # Sequences are usually Windows paths written by the acquisition software.
    return PureWindowsPath(encoding_sequence.strip()).name.lower()


def bit_width_from_sequence(encoding_sequence: str) -> int | None:
    """Return the bit width encoded in a sequence file name, if any."""
    match = _SEQUENCE_BIT_RE.match(_sequence_file_name(encoding_sequence))
    return int(match.group(1)) if match else None


def bit_width_from_filename(uimf_path: Path) -> int | None:
    """Return the bit width encoded in the dataset file name, if any."""
    match = _FILENAME_BIT_RE.search(uimf_path.stem)
    if not match:
        return None
    return int(match.group(1) or match.group(2))


def classify_encoding_sequences(
    sequences: set[str], uimf_path: Path
) -> EncodingResult:
    """Classify the distinct per-frame encoding sequences of one file.

    The first sequence (in sorted order) whose file name starts with
    ``<digit>bit`` decides the bit width; multiplexing is assumed to be
    uniform across the dataset. When every sequence is blank the dataset
    file name is used instead.
    """
    if not sequences:
        logger.error("UIMF file has no frames: %s", uimf_path)
        return EncodingResult.error()

    non_blank = sorted(seq for seq in sequences if seq.strip())
    if not non_blank:
        bit_width = bit_width_from_filename(uimf_path)
        if bit_width is None:
            return EncodingResult.not_multiplexed()
        return EncodingResult.multiplexed(bit_width)

    matches = {
        seq: width
        for seq in non_blank
        if (width := bit_width_from_sequence(seq)) is not None
    }
    if not matches:
        return EncodingResult.not_multiplexed()

    if len(set(matches.values())) > 1:
        logger.warning(
            "Multiple multiplexing bit widths in %s, which is abnormal: %s",
            uimf_path.name,
            ", ".join(sorted(matches)),
        )
    sequence, bit_width = next(iter(matches.items()))
    return EncodingResult.multiplexed(bit_width, sequence)


def classify_uimf_file(
    uimf_path: Path, reader_factory: UimfReaderFactory = open_uimf_reader
) -> EncodingResult:
    """Determine whether a ``.uimf`` file still needs demultiplexing.

    Parameters
    ----------
    uimf_path : Path
        Finalized ``.uimf`` file.
    reader_factory : UimfReaderFactory
        Opens the file for frame enumeration.

    Returns
    -------
    EncodingResult
        ``ERROR`` when the file cannot be read or has no frames.
    """
    try:
        with reader_factory(uimf_path) as reader:
            sequences = {frame.encoding_sequence or "" for frame in reader.frames()}
    except Exception as exc:
        logger.error("Error reading frames from %s: %s", uimf_path, exc)
        return EncodingResult.error()
    return classify_encoding_sequences(sequences, uimf_path)


def read_frame_method_mux_info(dotd_dir: Path) -> list[tuple[int, str]] | None:
    """Read ``(ImsMuxProcessing, ImsMuxSequence)`` pairs from IMSFrameMeth.xml.

    Returns ``None`` when the file is missing or cannot be parsed.
    """
    method_path = dotd_dir / ACQ_DATA_DIRECTORY / IMS_FRAME_METHOD_FILE
    sub_path = f"{ACQ_DATA_DIRECTORY}/{IMS_FRAME_METHOD_FILE}"
    if not method_path.is_file():
        logger.error("Agilent .D directory, %s does not exist", sub_path)
        return None

    method_info: list[tuple[int, str]] = []
    try:
        root = ET.parse(method_path).getroot()
        for node in root.iter("FrameMethod"):
            processing = int((node.findtext("ImsMuxProcessing") or "0").strip())
            sequence = node.findtext("ImsMuxSequence") or ""
            if processing > 0:
                method_info.append((processing, sequence))
    except (ET.ParseError, ValueError) as exc:
        logger.error("Agilent .D directory, error parsing %s: %s", sub_path, exc)
        return None

    if not method_info:
        logger.error(
            "Agilent .D directory, error parsing %s - no ImsMuxProcessing entries",
            sub_path,
        )
    return method_info


def dotd_mux_status(dotd_dir: Path) -> EncodingResult:
    """Classify an Agilent ``.d`` directory from its frame method metadata.

    The returned ``encoding_sequence`` is the first still-multiplexed
    sequence; the bit width is not stored in the method file and stays 0.
    """
    method_info = read_frame_method_mux_info(dotd_dir)
    if not method_info:
        return EncodingResult.error()

    mux_sequence = ""
    for processing, sequence in method_info:
        if not sequence.strip() or processing != MUX_PROCESSING_NONE:
            continue
        if not mux_sequence:
            mux_sequence = sequence
        elif mux_sequence != sequence:
            logger.warning(
                "Multiple multiplexing sequences in file, which is abnormal: '%s' and '%s'",
                mux_sequence,
                sequence,
            )

    if mux_sequence:
        return EncodingResult.multiplexed(0, mux_sequence)
    return EncodingResult.not_multiplexed()


def dotd_is_demultiplexed(dotd_dir: Path) -> bool:
    """Return ``True`` unless some multiplexed frame method is still undecoded."""
    method_info = read_frame_method_mux_info(dotd_dir)
    if not method_info:
        return False
    return not any(
        sequence.strip() and processing == MUX_PROCESSING_NONE
        for processing, sequence in method_info
    )
