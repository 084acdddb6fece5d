"""SDP time description section."""

from __future__ import annotations

from dataclasses import dataclass

from sdpmodel.exceptions import SDPInvalidArgument

from .common import SDPSection
from .fields import SDPRepeatField, SDPTimeField
from .serializer import serialize_time


__all__ = [
    "SDPTime",
]


@dataclass
class SDPTime(SDPSection):
    """
    SDP section for time description fields, defined in :rfc:`8866#section-5.9`.

    Owns one time field and the repeat fields following it, in arrival order.
    """

    time: SDPTimeField
    repeats: list[SDPRepeatField] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.time, SDPTimeField):
            raise SDPInvalidArgument(f"Time description requires a time field, got {self.time!r}")

    def set_time(self, time: SDPTimeField) -> None:
        """Replace the time field."""
        self._set_singleton("time", time, SDPTimeField)

    def get_repeats(self, create: bool = False) -> list[SDPRepeatField] | None:
        """
        Return the repeat fields list.

        :param create: whether to create (and store) an empty list if it's absent.
        :return: the list, or None if it's absent and `create` is False.
        """
        return self._get_list("repeats", create)

    def set_repeats(self, repeats: list[SDPRepeatField]) -> None:
        """Replace the repeat fields. An empty list clears them."""
        self._set_list("repeats", repeats, SDPRepeatField)

    def add_repeat(self, repeat: SDPRepeatField) -> None:
        """Append a repeat field."""
        if repeat is None:
            raise SDPInvalidArgument("Cannot add a None repeat field")
        self.get_repeats(create=True).append(repeat)  # type: ignore[union-attr]

    def copy(self) -> SDPTime:
        """Return a deep copy of the time description."""
        return SDPTime(
            time=self.time.copy(),
            repeats=self._copy_list(self.repeats, SDPRepeatField.copy),
        )

    def __str__(self) -> str:
        return serialize_time(self)
