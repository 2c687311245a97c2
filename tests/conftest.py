"""
Pytest configuration and fixtures for File Tools tests
"""

import cv2
import fitz
import numpy as np
import pytest

from common.enums import ToolName
from core.raster import Raster
from core.session_manager import SessionManager
from services.image_service import ImageService
from services.palette_service import PaletteService
from services.pdf_service import PdfService


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode RGBA or RGB pixels as PNG bytes."""
    if pixels.shape[2] == 4:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    else:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    success, buffer = cv2.imencode(".png", bgr)
    assert success
    return buffer.tobytes()


def make_pdf(pages: int, width: float = 595, height: float = 842) -> bytes:
    """Create a PDF with numbered pages."""
    doc = fitz.open()
    for number in range(1, pages + 1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Page {number}", fontsize=24)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def gradient_raster():
    """Opaque 400x300 raster with a horizontal red and vertical green gradient"""
    height, width = 300, 400
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)[None, :]
    pixels[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, None]
    pixels[:, :, 2] = 128
    pixels[:, :, 3] = 255
    return Raster(pixels)


@pytest.fixture
def test_image():
    """Create a test image for testing: white square and gray circle on black"""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    cv2.rectangle(image, (50, 50), (150, 150), (255, 255, 255), -1)
    cv2.circle(image, (230, 120), 40, (128, 128, 128), -1)
    return image


@pytest.fixture
def png_bytes(test_image):
    """The test image encoded as PNG"""
    return encode_png(test_image)


@pytest.fixture
def jpeg_bytes(test_image):
    """The test image encoded as JPEG"""
    success, buffer = cv2.imencode(".jpg", test_image, [cv2.IMWRITE_JPEG_QUALITY, 95])
    assert success
    return buffer.tobytes()


@pytest.fixture
def pdf_factory():
    """Factory creating PDFs with a given number of pages"""
    return make_pdf


@pytest.fixture
def session_manager():
    """Create SessionManager instance for testing"""
    manager = SessionManager(max_sessions=10)
    yield manager
    manager.cleanup()


@pytest.fixture
def image_service(session_manager):
    """Create ImageService instance for testing"""
    return ImageService(session_manager=session_manager)


@pytest.fixture
def palette_service(session_manager):
    """Create PaletteService instance for testing"""
    return PaletteService(session_manager=session_manager)


@pytest.fixture
def pdf_service(session_manager):
    """Create PdfService instance for testing"""
    return PdfService(session_manager=session_manager)


@pytest.fixture
def loaded_session(session_manager, image_service, png_bytes):
    """Factory opening a session for a tool with the PNG test image loaded"""

    def _open(tool: ToolName = ToolName.RESIZER):
        session = session_manager.create_session(tool)
        image_service.load_source(session.session_id, png_bytes, "image/png", "photo.png")
        return session

    return _open
