"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class FigmaFetchError(Exception):
    """Base exception for all application-specific errors."""


class ValidationError(FigmaFetchError):
    """Raised when a node URL is malformed or missing its file or node id."""


class LocatorError(FigmaFetchError):
    """
    Raised when the Figma API cannot provide an image URL for the requested node.
    """


class DownloadError(FigmaFetchError):
    """Raised when the rendered image cannot be fetched or written to disk."""


class ConfigurationError(FigmaFetchError):
    """Raised for issues related to configuration loading or validation."""


class PipelineError(FigmaFetchError):
    """
    Raised by the fetch pipeline to report which stage failed.

    The original stage error is available as ``__cause__``.
    """

    STAGE_DESCRIPTIONS = {
        "parse": "Error parsing Figma node URL",
        "locate": "Error getting image from Figma node",
        "download": "Error saving image locally",
    }

    def __init__(self, stage: str, error: Exception):
        self.stage = stage
        self.error = error
        description = self.STAGE_DESCRIPTIONS.get(stage, f"Error in stage '{stage}'")
        super().__init__(f"{description}: {error}")
