"""
AdCarbon — Error taxonomy
Validation and decode errors reach the caller; estimation errors never leave
the estimator.
"""


class AdCarbonError(Exception):
    """Base class for all pipeline errors."""


class FileValidationError(AdCarbonError):
    """Uploaded file has the wrong type, is empty or is too large."""


class ImageDecodeError(AdCarbonError):
    """Uploaded bytes could not be decoded as an image."""


class InvalidArgumentError(AdCarbonError, ValueError):
    """Negative or otherwise impossible input to a calculation."""


class EstimationServiceError(AdCarbonError):
    """The external estimation service failed, timed out or answered garbage."""
