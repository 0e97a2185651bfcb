"""Bank statement CSV ingestion.

Reads a whole statement file into transaction candidates. Rows are parsed
independently: a bad row becomes an error entry and the rest of the file is
still read. Only a file that cannot be read as delimited text fails as a whole.
"""

import csv
import io
import logging
from typing import Iterator

from smallbooks.domain.entities import CSVParseResult, RowErrorEntry
from smallbooks.domain.errors import CSVStreamError, RowError
from smallbooks.domain.row_parser import normalize_header, parse_row

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
SNIFF_DELIMITERS = ",;\t|"
SNIFF_LINES = 20


def decode_csv(file_bytes: bytes) -> str:
    """Decode file bytes as UTF-8 text, tolerating a byte order mark."""
    try:
        return file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVStreamError(f"File is not valid UTF-8 text: {e}") from e


def detect_delimiter(text: str) -> str:
    """Guess the field delimiter from the first lines, defaulting to a comma."""
    sample = "\n".join(text.splitlines()[:SNIFF_LINES])
    try:
        return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def iter_rows(text: str) -> Iterator[tuple[int, dict[str, str]]]:
    """Yield (line_number, row) pairs with normalized header names.

    The header is line 1, so the first data row is line 2. The generator
    reads lazily and cannot be rewound; call again with the same text to
    start over.

    Raises:
        CSVStreamError: If the text has no header row or is not valid
            delimited text
    """
    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=detect_delimiter(text))
    try:
        fieldnames = reader.fieldnames
        if not fieldnames:
            raise CSVStreamError("CSV file has no header row")
        reader.fieldnames = [normalize_header(name) for name in fieldnames]

        for line_number, row in enumerate(reader, start=2):
            # Extra values beyond the header are keyed by None; drop them
            yield line_number, {
                key: (value if value is not None else "")
                for key, value in row.items()
                if key is not None
            }
    except csv.Error as e:
        raise CSVStreamError(f"Malformed CSV: {e}") from e


def parse_csv(file_bytes: bytes, filename: str, dayfirst: bool = False) -> CSVParseResult:
    """Parse a bank statement CSV file into transaction candidates.

    Args:
        file_bytes: Raw file contents
        filename: Original file name, echoed in the result
        dayfirst: Read ambiguous dates as day first

    Returns:
        CSVParseResult with candidates and per-row errors, both in file order

    Raises:
        CSVStreamError: If the file cannot be decoded or read as CSV
    """
    text = decode_csv(file_bytes)
    candidates = []
    errors = []

    for line_number, row in iter_rows(text):
        try:
            candidates.append(parse_row(row, line_number, dayfirst=dayfirst))
        except RowError as e:
            logger.debug("Skipping line %d of %s: %s", line_number, filename, e)
            errors.append(RowErrorEntry(line=line_number, error=str(e), data=row))

    logger.info(
        "Parsed %s: %d candidate(s), %d row error(s)", filename, len(candidates), len(errors)
    )
    return CSVParseResult(candidates=candidates, errors=errors, filename=filename)
