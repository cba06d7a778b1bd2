"""
Utilities for parsing Figma node URLs and building local image paths.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from pathvalidate import sanitize_filename

from figma_fetch.exceptions import ValidationError
from figma_fetch.models.node import RENDER_FORMAT, NodeReference

log = logging.getLogger(__name__)

NODE_ID_PARAM = "node-id"
EXPECTED_PATH_SEGMENTS = 4
FILE_ID_SEGMENT = 2
INVALID_URL_PROMPT = "Please provide a valid Figma node URL"


def _split_node_url(url: str) -> tuple[list[str], Optional[str]]:
    """Returns the path segments and the ``node-id`` query value of a URL."""
    try:
        parsed = urlsplit(url.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid Figma node URL: {e}") from e

    segments = parsed.path.split("/")
    node_ids = parse_qs(parsed.query).get(NODE_ID_PARAM, [])
    node_id = node_ids[0].strip() if node_ids else None

    log.debug(f"Parsed path segments: {segments}")
    log.debug(f"Parsed {NODE_ID_PARAM}: {node_id}")
    return segments, node_id or None


def parse_node_url(url: str) -> NodeReference:
    """
    Parses a Figma node URL into its file id and node id.

    The path must split into exactly four segments
    (``/design/<file_id>/<name>``) and the query must carry a non-empty
    ``node-id`` parameter.

    Raises:
        ValidationError: If the URL does not have the expected shape.
    """
    segments, node_id = _split_node_url(url)

    if len(segments) != EXPECTED_PATH_SEGMENTS:
        raise ValidationError(
            f"Invalid Figma node URL: expected a path like '/design/<file_id>/<name>', "
            f"got {len(segments)} path segments."
        )
    file_id = segments[FILE_ID_SEGMENT].strip()
    if not file_id:
        raise ValidationError("Invalid Figma node URL: the file id is empty.")
    if not node_id:
        raise ValidationError(
            f"Invalid Figma node URL: missing '{NODE_ID_PARAM}' query parameter."
        )

    return NodeReference(file_id=file_id, node_id=node_id)


def validate_node_url(url: str) -> Optional[str]:
    """
    Returns a prompt message if the URL is not a valid node URL, else None.

    Never raises, so it can be used to validate input as it is typed.
    """
    try:
        parse_node_url(url)
    except ValidationError as e:
        log.debug(f"Rejected node URL '{url}': {e}")
        return INVALID_URL_PROMPT
    return None


def is_valid_node_url(url: str) -> bool:
    """Checks whether a URL can be parsed into a node reference."""
    return validate_node_url(url) is None


def create_dir(directory_path: Path) -> None:
    """Creates a directory (and its parents) if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def image_path_for(target_dir: Path, node_id: str) -> Path:
    """Returns the deterministic destination path ``<target_dir>/<node_id>.png``."""
    return target_dir / sanitize_filename(f"{node_id}.{RENDER_FORMAT}", platform="auto")
