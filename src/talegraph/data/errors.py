"""Custom exceptions for story data loading and validation."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when story files are missing or are not valid JSON."""


class DataValidationError(DataError):
    """Raised when story JSON content fails structural validation."""
