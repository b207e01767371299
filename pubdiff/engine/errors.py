"""Errors raised by the comparison engine."""

from __future__ import annotations


class UnsupportedMemberError(ValueError):
    """A value that is not a supported member descriptor reached the engine.

    This signals a programming mistake in the caller, never a property of the
    units being compared, so it is not caught anywhere inside pubdiff.
    """

    def __init__(self, parameter: str, value: object) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(
            f"Parameter '{parameter}' is an unsupported type: {type(value).__name__}"
        )


__all__ = ["UnsupportedMemberError"]
