"""
Orchestrates the parse, locate and download stages for a single node URL.
"""

import logging
from pathlib import Path
from typing import Protocol

from figma_fetch.exceptions import (
    DownloadError,
    LocatorError,
    PipelineError,
    ValidationError,
)
from figma_fetch.models.node import DownloadResult, NodeReference
from figma_fetch.utils.path import parse_node_url

log = logging.getLogger(__name__)


class ImageLocator(Protocol):
    async def fetch_image_url(self, node_ref: NodeReference) -> str: ...


class ImageDownloader(Protocol):
    async def download_image(
        self, image_url: str, target_dir: str | Path, node_id: str
    ) -> DownloadResult: ...


class FetchPipeline:
    """
    Runs UrlResolver -> ImageLocator -> ImageDownloader for one URL.

    Holds no state between runs; fetching the same node twice re-renders it and
    overwrites the previously saved file.
    """

    def __init__(self, locator: ImageLocator, downloader: ImageDownloader):
        self.locator = locator
        self.downloader = downloader

    async def run(self, url: str, target_dir: str | Path) -> DownloadResult:
        """
        Fetches the image for ``url`` into ``target_dir``.

        Raises:
            PipelineError: Naming the stage that failed, chained to its error.
        """
        try:
            node_ref = parse_node_url(url)
        except ValidationError as e:
            raise PipelineError("parse", e) from e
        log.debug(f"Fetching node {node_ref.node_id} from file {node_ref.file_id}")

        try:
            image_url = await self.locator.fetch_image_url(node_ref)
        except LocatorError as e:
            raise PipelineError("locate", e) from e

        try:
            result = await self.downloader.download_image(
                image_url, target_dir, node_ref.node_id
            )
        except DownloadError as e:
            raise PipelineError("download", e) from e

        log.debug(f"Pipeline finished: {result.saved_path}")
        return result
