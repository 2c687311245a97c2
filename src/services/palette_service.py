"""
Palette Service - Dominant color extraction for the color palette tool.
"""

import logging

from api.exceptions import NoSourceException
from common.base import OutputFile
from common.constants import APIConstants, PaletteConstants
from common.enums import PaletteExportFormat
from core.image import extract_palette, palette_to_css, render_palette_html
from core.image.codec import strip_extension
from core.image.palette import copy_all_text, palette_to_json
from core.session_manager import SessionManager
from schemas import FileResult, PaletteParams, PaletteResponse, PaletteResult
from services.base import BaseService, timer

logger = logging.getLogger(__name__)

EXPORT_MIME_TYPES = {
    PaletteExportFormat.HTML: "text/html",
    PaletteExportFormat.CSS: "text/css",
    PaletteExportFormat.JSON: "application/json",
}


class PaletteService(BaseService):
    """Service for palette extraction and export."""

    def __init__(
        self,
        session_manager: SessionManager,
        max_upload_mb: int = APIConstants.MAX_UPLOAD_SIZE_MB,
        sample_size: int = PaletteConstants.SAMPLE_SIZE,
    ):
        super().__init__(session_manager, max_upload_mb)
        self.sample_size = sample_size

    def _extract(self, session_id: str, params: PaletteParams):
        with self.processing(session_id) as session:
            if session.source is None:
                raise NoSourceException(session_id)
            palette = extract_palette(session.source, params.num_colors, self.sample_size)
        return session, palette

    def extract(self, session_id: str, params: PaletteParams) -> PaletteResponse:
        """
        Extract the dominant colors of the session image.

        Extraction is deterministic, so re-analysing the same image gives
        the same palette.

        Raises:
            SessionNotFoundException: If session not found
            NoSourceException: If no image was uploaded
        """
        with timer() as t:
            _, palette = self._extract(session_id, params)

        logger.debug(
            f"Palette for session {session_id}: {palette.hex_colors} "
            f"(fallback={palette.is_fallback}) in {t['ms']}ms"
        )
        return PaletteResponse(
            session_id=session_id,
            palette=palette,
            copy_text=copy_all_text(palette),
            processing_time_ms=t["ms"],
        )

    def export(
        self, session_id: str, export_format: PaletteExportFormat, params: PaletteParams
    ) -> FileResult:
        """
        Export the palette as a downloadable file and register it as the
        session's result.

        Returns:
            FileResult describing the export
        """
        session, palette = self._extract(session_id, params)
        stem = strip_extension(session.source_filename or "") or "export"
        export_format = PaletteExportFormat(export_format)

        output = OutputFile(
            data=render_export(palette, export_format, session.source_filename).encode("utf-8"),
            filename=f"color-palette-{stem}.{export_format.value}",
            mime_type=EXPORT_MIME_TYPES[export_format],
        )
        result = self.register_results(session_id, [output])[0]
        logger.info(f"Exported palette of session {session_id} as {output.filename}")
        return result


def render_export(palette: PaletteResult, export_format: PaletteExportFormat, name=None) -> str:
    if export_format is PaletteExportFormat.CSS:
        return palette_to_css(palette)
    if export_format is PaletteExportFormat.JSON:
        return palette_to_json(palette)
    return render_palette_html(palette, name)
