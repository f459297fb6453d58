class SubTrackerError(Exception):
    """Base class for subtracker exceptions."""
    pass


class DateParseError(SubTrackerError, ValueError):
    """Raised when a date field cannot be parsed into a calendar date."""

    def __init__(self, value, original_exception=None):
        super().__init__(f"Invalid date: {value!r}")
        self.value = value
        self.original_exception = original_exception


class SeedLoadError(SubTrackerError):
    """Raised when the JSON seed snapshot is missing or malformed."""
    pass
