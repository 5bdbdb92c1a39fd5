"""Exceptions raised by top2csv."""


class Top2CsvError(Exception):
    """Base class for all top2csv errors."""


class StreamFormatError(Top2CsvError):
    """The first meaningful line of a top log is not a snapshot header."""

    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(
            f'Malformed top log at line {line_number}: logs must start by "top - ", '
            f"got {line.strip()[:60]!r}"
        )


class NumericParseError(Top2CsvError):
    """A value token could not be converted to a number."""

    def __init__(self, token: str, line_number: int | None = None) -> None:
        self.token = token
        self.line_number = line_number
        where = f" at line {line_number}" if line_number is not None else ""
        super().__init__(f"Cannot parse numeric value {token!r}{where}")


class FileAccessError(Top2CsvError):
    """A file could not be opened for reading or writing."""

    def __init__(self, path, reason: str = "") -> None:
        self.path = path
        message = f"Error accessing path: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ConfigurationError(Top2CsvError):
    """The requested conversion is not valid."""


class UnknownPresetError(ConfigurationError):
    """A preset name that is not defined was requested."""

    def __init__(self, preset: str) -> None:
        self.preset = preset
        super().__init__(f"unknown preset '{preset}'")
