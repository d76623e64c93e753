"""Knobs for parse_plugin that aren't part of the file format."""

from dataclasses import dataclass


TEXT_ERROR_MODES = ("strict", "replace")


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Caller-selected parsing behavior.

    text_errors: "strict" fails the parse on a string that isn't valid
        Windows-1252; "replace" substitutes U+FFFD and carries on.
    """

    text_errors: str = "strict"

    def __post_init__(self) -> None:
        if self.text_errors not in TEXT_ERROR_MODES:
            raise ValueError(
                f"text_errors must be one of {TEXT_ERROR_MODES}, got {self.text_errors!r}"
            )


DEFAULT_OPTIONS = ParseOptions()
