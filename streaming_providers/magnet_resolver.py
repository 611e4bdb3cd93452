"""Magnet resolution workflow.

A magnet reference is turned into a playable link in four steps: the magnet is
submitted as a remote job, all its files are selected, the job is polled until
the backend finished downloading it, and the link of the chosen file is
unrestricted. Every failure deletes the remote job before propagating.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from db.config import settings
from db.enums import DebridProvider, ResolveStatus
from db.schemas import EpisodeHint, FileEntry
from streaming_providers.exceptions import ProviderException
from streaming_providers.host_reference import split_host_reference
from streaming_providers.parser import select_video_file
from streaming_providers.realdebrid.client import RealDebrid
from utils.const import MAGNET_DOWNLOADED_STATUSES, MAGNET_FAILED_STATUSES

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class ResolveState:
    provider: DebridProvider
    api_key: str = field(repr=False)
    host_reference: str
    client_ip: Optional[str] = None
    job_id: Optional[str] = None
    attempt: int = 0
    status: ResolveStatus = ResolveStatus.SUBMITTED


class MagnetResolveWorkflow:
    def __init__(
        self,
        client: RealDebrid,
        state: ResolveState,
        max_attempts: Optional[int] = None,
        poll_interval: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
        min_video_size: Optional[int] = None,
    ):
        self.client = client
        self.state = state
        self.max_attempts = max_attempts or settings.magnet_max_attempts
        self.poll_interval = (
            settings.magnet_poll_interval if poll_interval is None else poll_interval
        )
        self.sleep = sleep
        self.min_video_size = min_video_size

    async def run(self) -> str:
        magnet_link, hint = split_host_reference(self.state.host_reference)
        try:
            await self._submit(magnet_link)
            await self._select_files()
            torrent_info = await self._poll()
            link = self._select_link(torrent_info, hint)
            response = await self.client.create_download_link(link)
            self.state.status = ResolveStatus.RESOLVED
            return response["download"]
        except asyncio.CancelledError:
            await self._cleanup()
            raise
        except Exception:
            if self.state.status not in (ResolveStatus.FAILED, ResolveStatus.TIMED_OUT):
                self.state.status = ResolveStatus.FAILED
            await self._cleanup()
            raise

    async def _submit(self, magnet_link: str):
        self.state.status = ResolveStatus.SUBMITTED
        response = await self.client.add_magnet_link(magnet_link)
        job_id = response.get("id") if isinstance(response, dict) else None
        if not job_id:
            raise ProviderException(
                f"Failed to add magnet link: {response}", "transfer_error"
            )
        self.state.job_id = job_id

    async def _select_files(self):
        await self.client.start_torrent_download(self.state.job_id, file_ids="all")
        self.state.status = ResolveStatus.FILES_SELECTED

    async def _poll(self) -> dict:
        self.state.status = ResolveStatus.POLLING
        while self.state.attempt < self.max_attempts:
            self.state.attempt += 1
            torrent_info = await self.client.get_torrent_info(self.state.job_id)
            status = torrent_info.get("status")
            if status in MAGNET_DOWNLOADED_STATUSES:
                self.state.status = ResolveStatus.DOWNLOADED
                return torrent_info
            if status in MAGNET_FAILED_STATUSES:
                self.state.status = ResolveStatus.FAILED
                raise ProviderException(
                    f"Torrent cannot be downloaded due to status: {status}",
                    "transfer_error",
                )
            if self.state.attempt < self.max_attempts:
                await self.sleep(self.poll_interval)

        self.state.status = ResolveStatus.TIMED_OUT
        raise ProviderException(
            f"Torrent not ready after {self.max_attempts} attempts",
            "torrent_not_downloaded",
        )

    def _select_link(self, torrent_info: dict, hint: Optional[EpisodeHint]) -> str:
        links = torrent_info.get("links") or []
        if not links:
            raise ProviderException("No streamable links found", "no_matching_file")

        # links only exist for selected files, in file order
        selected_files = [
            FileEntry(
                id=file.get("id"),
                path=file.get("path"),
                size=file.get("bytes") or 0,
                selected=True,
            )
            for file in torrent_info.get("files", [])
            if file.get("selected")
        ]
        chosen = select_video_file(selected_files, hint, self.min_video_size)
        if chosen is None:
            raise ProviderException("No valid video files found", "no_matching_file")

        link_index = next(
            index for index, file in enumerate(selected_files) if file is chosen
        )
        if link_index >= len(links):
            raise ProviderException(
                f"No link for file {chosen.path} at index {link_index}",
                "no_matching_file",
            )
        link = links[link_index]
        if not link or link == "undefined":
            raise ProviderException("Direct link not found", "no_matching_file")
        return link

    async def _cleanup(self):
        if not self.state.job_id:
            return
        try:
            await self.client.delete_torrent(self.state.job_id)
        except Exception as error:
            logger.warning(
                "Failed to delete torrent %s after resolve failure: %s",
                self.state.job_id,
                error,
            )
