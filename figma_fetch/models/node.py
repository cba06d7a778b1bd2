"""
Pydantic models describing a node reference and the results of each pipeline stage.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

RENDER_FORMAT = "png"
RENDER_SCALE = 1


class NodeReference(BaseModel):
    """A file id and node id pair identifying a single design node."""

    file_id: str = Field(..., min_length=1)
    node_id: str = Field(..., min_length=1)

    class Config:
        """Pydantic model configuration."""

        frozen = True
        str_strip_whitespace = True

    @property
    def api_node_id(self) -> str:
        """
        The node id as the REST API expects it.

        Browser URLs encode node ids as ``1-2`` while the API keys them as ``1:2``.
        """
        return self.node_id.replace("-", ":")


class RenderRequest(BaseModel):
    """Parameter set sent to the image rendering endpoint."""

    file_id: str
    node_ids: list[str] = Field(..., min_length=1, max_length=1)
    format: Literal["png"] = RENDER_FORMAT
    scale: Literal[1] = RENDER_SCALE

    @classmethod
    def for_node(cls, node_ref: NodeReference) -> "RenderRequest":
        return cls(file_id=node_ref.file_id, node_ids=[node_ref.api_node_id])

    def to_query_params(self) -> dict[str, str]:
        return {
            "ids": ",".join(self.node_ids),
            "format": self.format,
            "scale": str(self.scale),
        }


class RemoteImageResult(BaseModel):
    """
    Outcome of a render request for one node: either an image URL or an API error.
    """

    image_url: Optional[str] = None
    api_error: Optional[str] = None

    @model_validator(mode="after")
    def validate_exactly_one(self) -> "RemoteImageResult":
        if bool(self.image_url) == bool(self.api_error):
            raise ValueError("Exactly one of 'image_url' or 'api_error' must be set.")
        return self

    @property
    def ok(self) -> bool:
        return self.image_url is not None

    @classmethod
    def from_response(
        cls, payload: dict, node_ref: NodeReference
    ) -> "RemoteImageResult":
        """
        Interprets an ``/images`` response body for the requested node.

        A response without an image for the node is reported as an error even
        when the API itself did not set ``err``.
        """
        if err := payload.get("err"):
            return cls(api_error=f"render failed: {err}")

        images = payload.get("images") or {}
        if not isinstance(images, dict):
            return cls(api_error="unexpected images map in response")

        for key in (node_ref.api_node_id, node_ref.node_id):
            image_url = images.get(key)
            if image_url is None:
                continue
            if not isinstance(image_url, str) or not image_url:
                return cls(
                    api_error=f"unexpected image entry for node '{node_ref.node_id}'"
                )
            return cls(image_url=image_url)

        return cls(
            api_error=(
                f"no image was rendered for node '{node_ref.node_id}' "
                "(the node may not exist or may not be renderable)"
            )
        )


class DownloadResult(BaseModel):
    """The file written for a fetched node."""

    saved_path: Path
    bytes_written: int = 0

    @field_validator("bytes_written")
    @classmethod
    def validate_bytes_written(cls, v: int) -> int:
        if v < 0:
            raise ValueError("bytes_written cannot be negative.")
        return v
