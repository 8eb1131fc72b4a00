from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from podsync.fetcher import Response


class PodSyncError(Exception):
    """Base class for every error raised by podsync itself."""


@dataclass
class FetchError(PodSyncError):
    """The store answered with a non-2xx status."""

    message: str
    response: Response

    def __str__(self) -> str:
        return self.message

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def status_text(self) -> str:
        return self.response.reason_phrase


class MissingLocationError(PodSyncError):
    pass


class NotAContainerError(PodSyncError, ValueError):
    pass


class ContainerExistsError(PodSyncError):
    pass
