"""
Image Service - Business logic for the image tools.

Orchestrates decode -> transform -> encode -> register for every image
operation and manages the source and overlay images of a session.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple, Union

from api.exceptions import NoSourceException, SessionNotFoundException
from common.base import OutputFile
from common.constants import APIConstants, ImageConstants
from common.enums import ImageFormat, ToolName
from core.image import (
    apply_aspect_ratio,
    apply_watermark,
    clamp_crop_region,
    compress_image,
    create_thumbnail,
    crop,
    decode_image,
    default_crop_region,
    derive_output_name,
    encode_image,
    format_file_size,
    parse_aspect_ratio,
    prefixed_output_name,
    remove_background,
    render_checkerboard_preview,
    resize,
    resolve_mime_type,
    resolve_resize_dimensions,
    rotate_flip,
    savings_percent,
    validate_image_type,
)
from core.raster import Raster
from core.session_manager import SessionManager, ToolSession
from schemas import (
    CompressParams,
    ConvertParams,
    CropParams,
    ImageResultResponse,
    ImageWatermarkParams,
    ResizeParams,
    RotateParams,
    Size,
    TextWatermarkParams,
    UploadResponse,
)
from services.base import BaseService, timer

logger = logging.getLogger(__name__)

# Raster result, encoded file, operation details
ToolOutput = Tuple[Raster, OutputFile, Dict[str, Any]]


class ImageService(BaseService):
    """
    Service for the image tools.

    Every operation reads the session's current source image and replaces
    the session's result with the newly encoded file.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        max_upload_mb: int = APIConstants.MAX_UPLOAD_SIZE_MB,
        thumbnail_width: int = ImageConstants.DEFAULT_THUMBNAIL_WIDTH,
    ):
        """
        Initialize image service.

        Args:
            session_manager: Session manager instance
            max_upload_mb: Largest accepted upload in MB
            thumbnail_width: Width of preview thumbnails in pixels
        """
        super().__init__(session_manager, max_upload_mb)
        self.thumbnail_width = thumbnail_width

    def _decode_upload(
        self, data: bytes, content_type: Optional[str], filename: Optional[str]
    ) -> Tuple[Raster, str]:
        self.check_upload_size(data, filename)
        with self.translate_errors("decode", filename):
            mime_type = resolve_mime_type(content_type, filename)
            image_format = validate_image_type(mime_type)
            raster = decode_image(data, mime_type)
        return raster, image_format.mime_type

    def load_source(
        self,
        session_id: str,
        data: bytes,
        content_type: Optional[str],
        filename: Optional[str],
    ) -> UploadResponse:
        """
        Replace the session's source image.

        Args:
            session_id: Session identifier
            data: Uploaded file contents
            content_type: Declared MIME type of the upload
            filename: Uploaded file name

        Returns:
            UploadResponse with preview handle and thumbnail

        Raises:
            SessionNotFoundException: If session not found
            InvalidInputTypeException: If the file is not a supported image
            DecodeFailureException: If the file cannot be decoded
        """
        filename = filename or "image"
        with timer() as t:
            with self.processing(session_id) as session:
                raster, mime_type = self._decode_upload(data, content_type, filename)
                handle = self.session_manager.load_source(
                    session_id, raster, data, mime_type, filename
                )
                if handle is None:
                    raise SessionNotFoundException(session_id)
                thumbnail = create_thumbnail(raster, self.thumbnail_width)

        default_region = None
        if session.tool is ToolName.CROPPER:
            default_region = default_crop_region(raster.width, raster.height)

        logger.info(
            f"Loaded source {filename} ({raster.width}x{raster.height}, {len(data)} bytes) "
            f"into session {session_id}"
        )
        return UploadResponse(
            session_id=session_id,
            handle=handle,
            filename=filename,
            mime_type=mime_type,
            size=len(data),
            size_formatted=format_file_size(len(data)),
            width=raster.width,
            height=raster.height,
            thumbnail_base64=thumbnail,
            default_crop=default_region,
            processing_time_ms=t["ms"],
        )

    def load_overlay(
        self,
        session_id: str,
        data: bytes,
        content_type: Optional[str],
        filename: Optional[str],
    ) -> UploadResponse:
        """
        Replace the session's overlay (watermark) image.

        Raises:
            SessionNotFoundException: If session not found
            InvalidInputTypeException: If the file is not a supported image
            DecodeFailureException: If the file cannot be decoded
        """
        filename = filename or "watermark"
        with timer() as t:
            with self.processing(session_id):
                raster, mime_type = self._decode_upload(data, content_type, filename)
                handle = self.session_manager.load_overlay(
                    session_id, raster, data, mime_type, filename
                )
                if handle is None:
                    raise SessionNotFoundException(session_id)
                thumbnail = create_thumbnail(raster, self.thumbnail_width)

        logger.info(f"Loaded overlay {filename} into session {session_id}")
        return UploadResponse(
            session_id=session_id,
            handle=handle,
            filename=filename,
            mime_type=mime_type,
            size=len(data),
            size_formatted=format_file_size(len(data)),
            width=raster.width,
            height=raster.height,
            thumbnail_base64=thumbnail,
            processing_time_ms=t["ms"],
        )

    def _execute_tool(
        self,
        session_id: str,
        operation: str,
        tool_func: Callable[[ToolSession], ToolOutput],
        preview_func: Optional[Callable[[Raster], Raster]] = None,
    ) -> ImageResultResponse:
        """
        Template method for image operations.

        This method encapsulates common logic:
        - Session lookup and the processing guard
        - Core error translation
        - Result registration (only after a successful encode)
        - Thumbnail generation

        Args:
            session_id: Session identifier
            operation: Operation name used in logs and errors
            tool_func: Receives the session, returns (raster, output, details)
            preview_func: Optional transform applied to the raster before
                the thumbnail is made

        Returns:
            ImageResultResponse
        """
        with timer() as t:
            with self.processing(session_id) as session:
                if session.source is None:
                    raise NoSourceException(session_id)

                with self.translate_errors(operation, session.source_filename):
                    raster, output, details = tool_func(session)
                    preview = preview_func(raster) if preview_func else raster
                    thumbnail = create_thumbnail(preview, self.thumbnail_width)

                result = self.register_results(session_id, [output])[0]
                original_size = len(session.source_data or b"")

        logger.debug(
            f"{operation}: {session.source_filename} -> {output.filename} "
            f"({output.size} bytes) in {t['ms']}ms"
        )
        return ImageResultResponse(
            session_id=session_id,
            operation=operation,
            result=result,
            dimensions=Size(width=raster.width, height=raster.height),
            original_size=original_size,
            original_size_formatted=format_file_size(original_size),
            thumbnail_base64=thumbnail,
            details=details,
            processing_time_ms=t["ms"],
        )

    def resize(self, session_id: str, params: ResizeParams) -> ImageResultResponse:
        """
        Resize the source image.

        With the aspect lock on, the dimension that was not edited is
        recomputed from the driving one. The source format is kept.
        """

        def run(session: ToolSession) -> ToolOutput:
            source = session.source
            width, height = resolve_resize_dimensions(
                source.width,
                source.height,
                params.width,
                params.height,
                params.maintain_aspect_ratio,
                params.driver,
            )
            result = resize(source, width, height)
            image_format = ImageFormat.from_mime(session.source_mime)
            output = OutputFile(
                data=encode_image(result, image_format, params.quality),
                filename=prefixed_output_name("resized_", session.source_filename),
                mime_type=image_format.mime_type,
            )
            return result, output, {"width": width, "height": height}

        return self._execute_tool(session_id, "resize", run)

    def crop(self, session_id: str, params: CropParams) -> ImageResultResponse:
        """
        Crop the source image.

        The requested box is clamped to the image; an aspect ratio preset
        derives the height from the width.
        """

        def run(session: ToolSession) -> ToolOutput:
            source = session.source
            region = clamp_crop_region(
                params.x, params.y, params.width, params.height, source.width, source.height
            )
            region = apply_aspect_ratio(
                region, parse_aspect_ratio(params.aspect_ratio), source.height
            )
            result = crop(source, region)
            output = OutputFile(
                data=encode_image(result, ImageFormat.JPEG, ImageConstants.DEFAULT_QUALITY),
                filename=derive_output_name(
                    session.source_filename, "_cropped", ImageFormat.JPEG.extension
                ),
                mime_type=ImageFormat.JPEG.mime_type,
            )
            return result, output, {"region": region.to_dict()}

        return self._execute_tool(session_id, "crop", run)

    def rotate(self, session_id: str, params: RotateParams) -> ImageResultResponse:
        """Rotate and/or flip the source image."""

        def run(session: ToolSession) -> ToolOutput:
            result = rotate_flip(
                session.source, params.angle, params.flip_horizontal, params.flip_vertical
            )
            output = OutputFile(
                data=encode_image(result, ImageFormat.JPEG, ImageConstants.DEFAULT_QUALITY),
                filename=derive_output_name(
                    session.source_filename, "_rotated", ImageFormat.JPEG.extension
                ),
                mime_type=ImageFormat.JPEG.mime_type,
            )
            return result, output, params.to_dict()

        return self._execute_tool(session_id, "rotate", run)

    def watermark(
        self, session_id: str, params: Union[TextWatermarkParams, ImageWatermarkParams]
    ) -> ImageResultResponse:
        """
        Apply a text or image watermark.

        Image watermarks use the session's overlay image.

        Raises:
            NoSourceException: If an image watermark is requested without overlay
        """

        def run(session: ToolSession) -> ToolOutput:
            if isinstance(params, ImageWatermarkParams) and session.overlay is None:
                raise NoSourceException(session_id, "watermark image")

            result = apply_watermark(session.source, params, session.overlay)
            output = OutputFile(
                data=encode_image(result, ImageFormat.JPEG, ImageConstants.DEFAULT_QUALITY),
                filename=derive_output_name(
                    session.source_filename, "_watermarked", ImageFormat.JPEG.extension
                ),
                mime_type=ImageFormat.JPEG.mime_type,
            )
            return result, output, params.to_dict()

        return self._execute_tool(session_id, "watermark", run)

    def remove_background(self, session_id: str) -> ImageResultResponse:
        """
        Make the background transparent with the edge-mask heuristic.

        The result is always PNG; its thumbnail is shown over a checkerboard.
        """

        def run(session: ToolSession) -> ToolOutput:
            result = remove_background(session.source)
            output = OutputFile(
                data=encode_image(result, ImageFormat.PNG),
                filename=derive_output_name(
                    session.source_filename, "_no_bg", ImageFormat.PNG.extension
                ),
                mime_type=ImageFormat.PNG.mime_type,
            )
            return result, output, {}

        return self._execute_tool(
            session_id, "remove-background", run, preview_func=render_checkerboard_preview
        )

    def convert(self, session_id: str, params: ConvertParams) -> ImageResultResponse:
        """
        Convert the source image to another format.

        Quality is only applied to JPEG output.
        """

        def run(session: ToolSession) -> ToolOutput:
            quality = params.quality if params.format is ImageFormat.JPEG else None
            output = OutputFile(
                data=encode_image(session.source, params.format, quality),
                filename=derive_output_name(
                    session.source_filename, "", params.format.extension
                ),
                mime_type=params.format.mime_type,
            )
            return session.source, output, params.to_dict()

        return self._execute_tool(session_id, "convert", run)

    def compress(self, session_id: str, params: CompressParams) -> ImageResultResponse:
        """
        Re-encode the source file at a lower quality.

        When the re-encoded file is not smaller the original bytes are kept.
        """

        def run(session: ToolSession) -> ToolOutput:
            data, mime_type = compress_image(
                session.source_data, session.source_mime, params.quality, params.format
            )
            name = session.source_filename
            if mime_type != session.source_mime:
                name = derive_output_name(name, "", ImageFormat.from_mime(mime_type).extension)

            output = OutputFile(
                data=data,
                filename=prefixed_output_name("compressed_", name),
                mime_type=mime_type,
            )
            details = {
                "quality": params.quality,
                "kept_original": data is session.source_data,
                "savings_percent": savings_percent(len(session.source_data), len(data)),
            }
            return session.source, output, details

        return self._execute_tool(session_id, "compress", run)
