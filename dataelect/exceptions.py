class DataelectError(Exception): ...


class IngestError(DataelectError): ...


class UnreadableFileError(IngestError):
    """The source could not be decoded as a spreadsheet."""


class FileTimeoutError(UnreadableFileError):
    """Loading a single source exceeded its time budget."""


class NoValidDataError(IngestError):
    """Merging produced zero readings, usually a wrong mapping."""

    def __init__(self, message: str = "no valid data found"):
        super().__init__(message)


class MappingError(DataelectError): ...


class AggregationError(DataelectError): ...


class ExportError(DataelectError): ...


class ProjectLoadError(DataelectError): ...


def require(condition: bool, message: str, exc: type[DataelectError] = DataelectError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
