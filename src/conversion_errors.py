#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    def at_line(self, path: Path | str, line_number: int) -> ConversionError:
        self.line_number = line_number
        self.args = (f"{path}:{line_number}: {self}",)
        return self


class FileOpenError(ConversionError):
    def __init__(self, path: Path | str, mode: str = "reading") -> None:
        self.path = Path(path)
        self.mode = mode
        super().__init__(f'Cannot open "{self.path}" for {mode}')


class NoActiveMaterial(ConversionError):
    def __init__(self) -> None:
        super().__init__("Face found before any usemtl")


class IndexOutOfRange(ConversionError):
    KINDS = ("position", "uv", "normal")

    def __init__(self, kind: str, index: int, count: int) -> None:
        if kind not in self.KINDS:
            raise ValueError(f"Unknown attribute kind: {kind}")
        self.kind = kind
        self.index = index
        self.count = count
        super().__init__(f"{kind.capitalize()} index {index} out of range (1..{count})")


class MalformedCommand(ConversionError):
    def __init__(self, command: str, argument: str, reason: str) -> None:
        self.command = command
        self.argument = argument
        super().__init__(f'Malformed "{command}" command "{argument}": {reason}')


class ArrayFormatError(ConversionError):
    pass


class DescriptorError(ConversionError):
    pass


class ConfigError(ConversionError):
    pass
