"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

ACCESS_TOKEN_LENGTH = 45
DEFAULT_OUTPUT_DIR = ".output/images/"
DEFAULT_API_BASE_URL = "https://api.figma.com/v1/"


class FetchConfig(BaseModel):
    """A validated configuration model for the application."""

    # Authentication & API
    access_token: str = Field(..., repr=False)
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: int = 60

    # Output
    output_dir: str = DEFAULT_OUTPUT_DIR

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        """Personal access tokens are always exactly 45 characters."""
        if len(v) != ACCESS_TOKEN_LENGTH:
            raise ValueError("Invalid Figma Personal Access Token")
        return v

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://.")
        return v if v.endswith("/") else v + "/"

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1 or v > 600:
            raise ValueError("Request timeout must be between 1 and 600 seconds.")
        return v

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Output directory cannot be empty.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that may appear in the INI file."""
        internal_fields = {"access_token"}
        return {key for key in cls.model_fields if key not in internal_fields}
