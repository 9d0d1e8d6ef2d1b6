"""
Protocol interfaces for decoded telemetry messages.

These protocols define the contract between the binary decoder and the
segmentation pipeline. fitparse's DataMessage/FieldData satisfy them as-is,
and tests can supply lightweight fakes.
"""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class RecordField(Protocol):
    """Protocol for a single named and numbered field of a decoded message."""

    @property
    def name(self) -> str:
        """Field name from the decoder profile (e.g. 'position_lat')."""
        ...

    @property
    def def_num(self) -> Optional[int]:
        """Field definition number within its message."""
        ...

    @property
    def value(self) -> Any:
        """
        Decoded field value.

        Strings for enumerations, ints for integer types, floats for scaled
        or floating types, naive UTC datetimes for timestamps, or None when
        the device wrote the invalid marker.
        """
        ...

    @property
    def units(self) -> Optional[str]:
        """Unit label, if the profile defines one."""
        ...


@runtime_checkable
class TelemetryRecord(Protocol):
    """Protocol for one decoded message of an activity file."""

    @property
    def name(self) -> str:
        """
        Message kind discriminator.

        Returns
        -------
        str
            Message name, e.g. 'record' for position samples or 'event'.
        """
        ...

    @property
    def fields(self) -> Sequence[RecordField]:
        """Fields of the message in decoding order."""
        ...
