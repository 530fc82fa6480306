"""
Fatal errors raised by the pipeline. Row-level problems are reported as
ProcessingWarning records instead.
"""


class SleepDataError(ValueError):
    """Base class for errors that abort a whole batch"""


class UnrecognizedShapeError(SleepDataError):
    """The batch matches none of the supported input shapes"""


class MissingColumnError(SleepDataError):
    """A required identifying column is absent from the batch"""
