"""Prescription session orchestration.

This module holds the single-flight analysis flow that the UI layers
(CLI today, any future API) drive: pick an image, optionally rotate it,
send it to an analyzer and keep the outcome. Side-effects such as
printing or progress spinners stay outside; UI layers subscribe through
`SessionHooks`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from adapters.image_processing import PreparedImage, prepare_image
from core.config import AppSettings
from core.domain.errors import SAMPLE_FAILED_MESSAGE, user_message_for
from core.domain.models import AnalysisResult, AppStatus
from core.interfaces.analyzer import PrescriptionAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class SessionHooks:
    """Optional callbacks for UI layers (spinners, status lines)."""

    status_changed: Callable[[AppStatus], None] | None = None
    image_prepared: Callable[[PreparedImage], None] | None = None


@dataclass
class PrescriptionSession:
    """State of one prescription scan.

    Mirrors the states a user sees: idle -> processing -> success/error,
    with a short "uploading" phase while a file or the sample is loaded.
    """

    settings: AppSettings = field(default_factory=AppSettings)
    hooks: SessionHooks = field(default_factory=SessionHooks)
    image_bytes: bytes | None = None
    filename: str | None = None
    rotation: int = 0
    status: AppStatus = AppStatus.IDLE
    result: AnalysisResult | None = None
    error: str | None = None

    def _set_status(self, status: AppStatus) -> None:
        self.status = status
        if self.hooks.status_changed:
            self.hooks.status_changed(status)

    @property
    def has_image(self) -> bool:
        return self.image_bytes is not None

    def select_file(self, data: bytes, filename: str | None = None) -> None:
        """Load a new image, discarding any previous result."""

        self._set_status(AppStatus.UPLOADING)
        self.image_bytes = data
        self.filename = filename
        self.rotation = 0
        self.error = None
        self.result = None
        self._set_status(AppStatus.IDLE)

    async def load_sample(self, fetch: Callable[[], Awaitable[bytes]]) -> bool:
        """Load the bundled sample prescription through `fetch`."""

        self._set_status(AppStatus.UPLOADING)
        try:
            data = await fetch()
        except Exception as exc:
            logger.warning("Sample load error: %s", exc)
            self.error = SAMPLE_FAILED_MESSAGE
            self._set_status(AppStatus.IDLE)
            return False

        self.image_bytes = data
        self.filename = "sample_prescription.jpg"
        self.rotation = 0
        self.error = None
        self.result = None
        self._set_status(AppStatus.IDLE)
        return True

    def rotate(self) -> int:
        """Rotate the preview a quarter turn clockwise."""

        self.rotation = (self.rotation + 90) % 360
        return self.rotation

    def clear(self) -> None:
        self.image_bytes = None
        self.filename = None
        self.rotation = 0
        self.result = None
        self.error = None
        self._set_status(AppStatus.IDLE)

    def dismiss_error(self) -> None:
        """"Try again": keep the image, go back to idle."""

        self.error = None
        self._set_status(AppStatus.IDLE)

    async def process(self, analyzer: PrescriptionAnalyzer) -> AnalysisResult | None:
        """Downscale the current image and run it through `analyzer`.

        Errors are not raised: they land in `self.error` as one of the two
        user-facing messages and the status becomes ERROR.
        """

        if self.image_bytes is None:
            return None

        self._set_status(AppStatus.PROCESSING)
        self.error = None
        try:
            prepared = prepare_image(
                self.image_bytes,
                rotation=self.rotation,
                max_dimension=self.settings.max_image_dimension,
                quality=self.settings.jpeg_quality,
            )
            if self.hooks.image_prepared:
                self.hooks.image_prepared(prepared)
            result = await analyzer.analyze(prepared.base64_data, prepared.mime_type)
        except Exception as exc:
            logger.error("Prescription analysis failed: %s", exc, exc_info=logger.isEnabledFor(logging.DEBUG))
            self.error = user_message_for(exc)
            self._set_status(AppStatus.ERROR)
            return None

        self.result = result
        self._set_status(AppStatus.SUCCESS)
        return result
