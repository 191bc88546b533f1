class ShiftFactoryError(Exception):
    """Base error for the pipeline."""


class FieldParseError(ShiftFactoryError):
    """
    A single CSV field could not be parsed.

    Recovered inside ingestion: the field (or the row, for called_time) is
    skipped and the run continues.
    """

    def __init__(self, column: str, value: str, reason: str):
        self.column = column
        self.value = value
        self.reason = reason
        super().__init__(f"error parsing {column} {value!r}: {reason}")


class IngestionFileError(ShiftFactoryError):
    """Input CSV missing, unreadable, or header without called_time."""


class DecodeError(ShiftFactoryError):
    """Scheduler response is not a JSON array of flat string objects."""


class MissingCredentialError(ShiftFactoryError):
    pass


class ExternalServiceError(ShiftFactoryError):
    pass


class OutputWriteError(ShiftFactoryError):
    pass
