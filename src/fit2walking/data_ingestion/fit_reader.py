import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Union

from fitparse import FitFile
from fitparse.utils import FitParseError

from fit2walking.data_ingestion.record_adapter import RECORD_MESSAGE
from fit2walking.errors import TrackInputError
from fit2walking.protocols import TelemetryRecord

logger = logging.getLogger(__name__)


class FitReader:
    """
    Reads the data messages of a FIT activity file.
    Decoding is delegated to fitparse; messages are yielded in file order.
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Args:
            file_path: Path to the FIT file.
        """
        self.file_path = Path(file_path)

    def iter_records(self) -> Iterator[TelemetryRecord]:
        """
        Yields every decoded data message.

        Raises:
            TrackInputError: If the file cannot be opened or the stream is malformed.
        """
        logger.info(f"Reading FIT file {self.file_path}")
        try:
            with FitFile(str(self.file_path)) as fit_file:
                yield from fit_file.get_messages()
        except FitParseError as e:
            raise TrackInputError(f"Malformed FIT file {self.file_path}: {e}") from e
        except OSError as e:
            raise TrackInputError(f"Cannot read {self.file_path}: {e}") from e


def format_record(record: TelemetryRecord) -> List[str]:
    """Human-readable dump of one message: its kind, then one line per field."""
    lines = [record.name]
    for field in record.fields:
        units = field.units or ""
        lines.append(f"  {field.name}[{field.def_num}] = {field.value!r} {units}".rstrip())
    return lines


def echo_records(
    records: Iterable[TelemetryRecord],
    include_position_records: bool = True,
    stream: Optional[TextIO] = None,
) -> Iterator[TelemetryRecord]:
    """
    Pass records through unchanged, dumping each one to `stream` (stderr by default).

    Args:
        records: Decoded messages.
        include_position_records: If False, 'record' messages are not dumped.
        stream: Destination for the dump.
    """
    out = stream if stream is not None else sys.stderr
    for record in records:
        if include_position_records or record.name != RECORD_MESSAGE:
            out.write("\n".join(format_record(record)) + "\n")
        yield record
