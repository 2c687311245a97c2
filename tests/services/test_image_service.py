"""
Tests for services.image_service module.

Tests the image tools at the service layer: uploads, every operation,
result replacement and the per-session processing guard.
"""

import cv2
import numpy as np
import pytest

from api.exceptions import (
    DecodeFailureException,
    EncodeFailureException,
    FileTooLargeException,
    InvalidInputTypeException,
    NoSourceException,
    SessionBusyException,
    SessionNotFoundException,
)
from common.base import Region
from common.enums import ImageFormat, ToolName
from core.errors import EncodeFailureError
from schemas import (
    CompressParams,
    ConvertParams,
    CropParams,
    ImageWatermarkParams,
    ResizeParams,
    RotateParams,
    TextWatermarkParams,
)
from services.image_service import ImageService


def _decode(data: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)


class TestUploads:
    """Tests for source and overlay uploads"""

    def test_load_source(self, image_service, session_manager, png_bytes):
        """Test uploading a source image"""
        session = session_manager.create_session(ToolName.RESIZER)

        response = image_service.load_source(
            session.session_id, png_bytes, "image/png", "photo.png"
        )

        assert response.width == 300
        assert response.height == 200
        assert response.mime_type == "image/png"
        assert response.size == len(png_bytes)
        assert response.handle.startswith("blob:")
        assert response.thumbnail_base64.startswith("data:image/jpeg;base64,")
        assert response.default_crop is None
        assert session_manager.blobs.get(response.handle).data == png_bytes
        assert session.source.size == (300, 200)

    def test_cropper_gets_default_region(self, image_service, session_manager, png_bytes):
        """Test cropper sessions receive the initial crop box"""
        session = session_manager.create_session(ToolName.CROPPER)

        response = image_service.load_source(
            session.session_id, png_bytes, "image/png", "photo.png"
        )

        assert response.default_crop == Region(x=75, y=50, width=150, height=100)

    def test_type_from_filename(self, image_service, session_manager, png_bytes):
        """Test generic content types are resolved from the file name"""
        session = session_manager.create_session(ToolName.RESIZER)

        response = image_service.load_source(
            session.session_id, png_bytes, "application/octet-stream", "photo.png"
        )

        assert response.mime_type == "image/png"

    def test_rejects_non_image(self, image_service, session_manager):
        """Test non-image uploads are rejected with 415"""
        session = session_manager.create_session(ToolName.RESIZER)

        with pytest.raises(InvalidInputTypeException) as exc_info:
            image_service.load_source(session.session_id, b"%PDF", "application/pdf", "a.pdf")

        assert exc_info.value.status_code == 415
        assert session.source is None

    def test_rejects_corrupt_image(self, image_service, session_manager):
        """Test undecodable uploads are rejected with 422"""
        session = session_manager.create_session(ToolName.RESIZER)

        with pytest.raises(DecodeFailureException) as exc_info:
            image_service.load_source(session.session_id, b"garbage", "image/png", "bad.png")

        assert exc_info.value.status_code == 422
        assert session.processing is False

    def test_rejects_large_upload(self, session_manager, png_bytes):
        """Test uploads over the configured limit"""
        service = ImageService(session_manager, max_upload_mb=0)
        session = session_manager.create_session(ToolName.RESIZER)

        with pytest.raises(FileTooLargeException):
            service.load_source(session.session_id, png_bytes, "image/png", "photo.png")

    def test_unknown_session(self, image_service, png_bytes):
        """Test uploading into a missing session"""
        with pytest.raises(SessionNotFoundException):
            image_service.load_source("missing", png_bytes, "image/png", "photo.png")

    def test_load_overlay(self, image_service, loaded_session, png_bytes):
        """Test uploading a watermark image"""
        session = loaded_session(ToolName.WATERMARKER)

        response = image_service.load_overlay(
            session.session_id, png_bytes, "image/png", "logo.png"
        )

        assert response.filename == "logo.png"
        assert session.overlay is not None
        assert session.overlay_handle == response.handle


class TestOperations:
    """Tests for each image operation"""

    def test_requires_source(self, image_service, session_manager):
        """Test operations on sessions without an image"""
        session = session_manager.create_session(ToolName.RESIZER)

        with pytest.raises(NoSourceException) as exc_info:
            image_service.resize(session.session_id, ResizeParams())

        assert exc_info.value.status_code == 400
        assert session.processing is False

    def test_resize(self, image_service, session_manager, loaded_session):
        """Test resize keeps the aspect ratio and the source format"""
        session = loaded_session()

        response = image_service.resize(
            session.session_id, ResizeParams(width=150, height=999)
        )

        assert response.operation == "resize"
        assert (response.dimensions.width, response.dimensions.height) == (150, 100)
        assert response.result.mime_type == "image/png"
        assert response.result.filename == "resized_photo.png"
        assert session.result_handles == [response.result.handle]
        data = session_manager.blobs.get(response.result.handle).data
        assert _decode(data).shape[:2] == (100, 150)

    def test_resize_free_dimensions(self, image_service, loaded_session):
        """Test resize to exact dimensions without the aspect lock"""
        session = loaded_session()

        response = image_service.resize(
            session.session_id,
            ResizeParams(width=800, height=600, maintain_aspect_ratio=False),
        )

        assert response.details == {"width": 800, "height": 600}

    def test_crop(self, image_service, session_manager, loaded_session):
        """Test crop output size, format and name"""
        session = loaded_session(ToolName.CROPPER)

        response = image_service.crop(
            session.session_id, CropParams(x=50, y=25, width=100, height=80)
        )

        assert (response.dimensions.width, response.dimensions.height) == (100, 80)
        assert response.result.mime_type == "image/jpeg"
        assert response.result.filename == "photo_cropped.jpg"
        assert response.details["region"] == {"x": 50, "y": 25, "width": 100, "height": 80}
        data = session_manager.blobs.get(response.result.handle).data
        assert _decode(data).shape[:2] == (80, 100)

    def test_crop_with_aspect_ratio(self, image_service, loaded_session):
        """Test a preset ratio derives the crop height"""
        session = loaded_session(ToolName.CROPPER)

        response = image_service.crop(
            session.session_id, CropParams(x=0, y=0, width=100, height=10, aspect_ratio="1:1")
        )

        assert (response.dimensions.width, response.dimensions.height) == (100, 100)

    def test_crop_clamped(self, image_service, loaded_session):
        """Test an oversized crop box is clamped to the image"""
        session = loaded_session(ToolName.CROPPER)

        response = image_service.crop(
            session.session_id, CropParams(x=-20, y=150, width=500, height=100)
        )

        assert response.details["region"] == {"x": 0, "y": 100, "width": 300, "height": 100}

    def test_rotate(self, image_service, loaded_session):
        """Test rotation swaps dimensions on quarter turns"""
        session = loaded_session(ToolName.ROTATOR)

        response = image_service.rotate(
            session.session_id, RotateParams(angle=90, flip_horizontal=True)
        )

        assert (response.dimensions.width, response.dimensions.height) == (200, 300)
        assert response.result.filename == "photo_rotated.jpg"
        assert response.details["flip_horizontal"] is True

    def test_text_watermark(self, image_service, loaded_session):
        """Test a text watermark produces a JPEG of the same size"""
        session = loaded_session(ToolName.WATERMARKER)

        response = image_service.watermark(
            session.session_id, TextWatermarkParams(text="Sample", opacity=80)
        )

        assert (response.dimensions.width, response.dimensions.height) == (300, 200)
        assert response.result.filename == "photo_watermarked.jpg"
        assert response.details["type"] == "text"

    def test_image_watermark_requires_overlay(self, image_service, loaded_session):
        """Test image watermarks without an uploaded overlay"""
        session = loaded_session(ToolName.WATERMARKER)

        with pytest.raises(NoSourceException):
            image_service.watermark(session.session_id, ImageWatermarkParams())

        assert session.processing is False

    def test_image_watermark(self, image_service, loaded_session, png_bytes):
        """Test image watermark with an overlay"""
        session = loaded_session(ToolName.WATERMARKER)
        image_service.load_overlay(session.session_id, png_bytes, "image/png", "logo.png")

        response = image_service.watermark(
            session.session_id, ImageWatermarkParams(opacity=100, position="center")
        )

        assert response.result.mime_type == "image/jpeg"

    def test_remove_background(self, image_service, session_manager, loaded_session):
        """Test background removal produces a transparent PNG"""
        session = loaded_session(ToolName.BACKGROUND_REMOVER)

        response = image_service.remove_background(session.session_id)

        assert response.result.mime_type == "image/png"
        assert response.result.filename == "photo_no_bg.png"
        # Preview is rendered over a checkerboard, so it is opaque
        assert response.thumbnail_base64.startswith("data:image/jpeg;base64,")
        decoded = _decode(session_manager.blobs.get(response.result.handle).data)
        assert decoded.shape == (200, 300, 4)
        assert decoded[0, 0, 3] == 0

    @pytest.mark.parametrize(
        "image_format,filename",
        [
            (ImageFormat.WEBP, "photo.webp"),
            (ImageFormat.JPEG, "photo.jpg"),
            (ImageFormat.BMP, "photo.bmp"),
            (ImageFormat.GIF, "photo.gif"),
        ],
    )
    def test_convert(self, image_service, loaded_session, image_format, filename):
        """Test format conversion names and types"""
        session = loaded_session(ToolName.CONVERTER)

        response = image_service.convert(
            session.session_id, ConvertParams(format=image_format, quality=0.7)
        )

        assert response.result.mime_type == image_format.mime_type
        assert response.result.filename == filename

    def test_compress(self, image_service, session_manager, jpeg_bytes):
        """Test compression of a high quality JPEG"""
        session = session_manager.create_session(ToolName.COMPRESSOR)
        image_service.load_source(session.session_id, jpeg_bytes, "image/jpeg", "photo.jpg")

        response = image_service.compress(session.session_id, CompressParams(quality=0.3))

        assert response.result.filename == "compressed_photo.jpg"
        assert response.result.size < len(jpeg_bytes)
        assert response.details["kept_original"] is False
        assert response.details["savings_percent"] > 0
        assert response.original_size == len(jpeg_bytes)

    def test_compress_to_other_format(self, image_service, loaded_session):
        """Test compression with a different output format renames the file"""
        session = loaded_session(ToolName.COMPRESSOR)

        response = image_service.compress(
            session.session_id, CompressParams(quality=0.5, format=ImageFormat.WEBP)
        )

        assert response.result.mime_type == "image/webp"
        assert response.result.filename == "compressed_photo.webp"


class TestResultLifecycle:
    """Tests for result replacement and the processing guard"""

    def test_new_result_releases_previous(self, image_service, session_manager, loaded_session):
        """Test that each operation replaces the session's previous result"""
        session = loaded_session()
        first = image_service.resize(session.session_id, ResizeParams(width=100))

        second = image_service.resize(session.session_id, ResizeParams(width=50))

        assert session_manager.blobs.get(first.result.handle) is None
        assert session_manager.blobs.get(second.result.handle) is not None
        assert session.result_handles == [second.result.handle]

    def test_busy_session(self, image_service, session_manager, loaded_session):
        """Test concurrent operations on one session are rejected"""
        session = loaded_session()
        session_manager.begin_processing(session.session_id)

        with pytest.raises(SessionBusyException) as exc_info:
            image_service.resize(session.session_id, ResizeParams())

        assert exc_info.value.status_code == 409

    def test_encode_failure_keeps_previous_result(
        self, image_service, session_manager, loaded_session, monkeypatch
    ):
        """Test a failed encode leaves the previous result and clears the busy flag"""
        session = loaded_session(ToolName.ROTATOR)
        first = image_service.rotate(session.session_id, RotateParams(angle=90))

        def fail(*args, **kwargs):
            raise EncodeFailureError("encoder produced no output")

        monkeypatch.setattr("services.image_service.encode_image", fail)

        with pytest.raises(EncodeFailureException) as exc_info:
            image_service.rotate(session.session_id, RotateParams(angle=180))

        assert exc_info.value.status_code == 500
        assert session.result_handles == [first.result.handle]
        assert session_manager.blobs.get(first.result.handle) is not None
        assert session.processing is False

    def test_unknown_session(self, image_service):
        """Test operations on missing sessions"""
        with pytest.raises(SessionNotFoundException):
            image_service.rotate("missing", RotateParams())
