"""
Shared service helpers.

Session lookup, the per-session processing guard and translation of core
errors into API exceptions.
"""

import logging
import time
from contextlib import contextmanager
from typing import Generator, List, Optional, Sequence

from api.exceptions import (
    DecodeFailureException,
    EncodeFailureException,
    FileTooLargeException,
    InvalidInputTypeException,
    SessionBusyException,
    SessionNotFoundException,
)
from common.base import OutputFile
from common.constants import APIConstants
from core.errors import DecodeFailureError, EncodeFailureError, InvalidInputTypeError
from core.image.codec import format_file_size
from core.session_manager import SessionManager, ToolSession
from schemas.common import FileResult

logger = logging.getLogger(__name__)


@contextmanager
def timer() -> Generator[dict, None, None]:
    """Measure a block; the yielded dict gets its duration under 'ms'."""
    elapsed = {"ms": 0}
    start = time.perf_counter()
    try:
        yield elapsed
    finally:
        elapsed["ms"] = int((time.perf_counter() - start) * 1000)


class BaseService:
    """Base class for services operating on tool sessions."""

    def __init__(
        self,
        session_manager: SessionManager,
        max_upload_mb: int = APIConstants.MAX_UPLOAD_SIZE_MB,
    ):
        """
        Initialize service.

        Args:
            session_manager: Session manager instance
            max_upload_mb: Largest accepted upload in MB
        """
        self.session_manager = session_manager
        self.max_upload_bytes = max_upload_mb * 1024 * 1024

    def get_session(self, session_id: str) -> ToolSession:
        """
        Get session by ID.

        Raises:
            SessionNotFoundException: If session not found
        """
        session = self.session_manager.get_session(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def check_upload_size(self, data: bytes, filename: Optional[str]) -> None:
        """
        Raises:
            FileTooLargeException: If the upload exceeds the configured limit
        """
        if len(data) > self.max_upload_bytes:
            raise FileTooLargeException(filename or "upload", len(data), self.max_upload_bytes)

    @contextmanager
    def processing(self, session_id: str) -> Generator[ToolSession, None, None]:
        """
        Run one operation on a session.

        The session is marked busy for the duration of the block and is
        always released again, whatever the block raises.

        Raises:
            SessionNotFoundException: If session not found
            SessionBusyException: If another operation is running
        """
        session = self.get_session(session_id)
        if not self.session_manager.begin_processing(session_id):
            raise SessionBusyException(session_id)
        try:
            yield session
        finally:
            self.session_manager.end_processing(session_id)

    @contextmanager
    def translate_errors(self, operation: str, filename: Optional[str] = None):
        """Re-raise core errors as API exceptions."""
        try:
            yield
        except InvalidInputTypeError as e:
            raise InvalidInputTypeException(e.mime_type, e.accepted) from e
        except DecodeFailureError as e:
            raise DecodeFailureException(filename or "input", str(e)) from e
        except EncodeFailureError as e:
            raise EncodeFailureException(operation, str(e)) from e

    def register_results(self, session_id: str, outputs: Sequence[OutputFile]) -> List[FileResult]:
        """
        Register outputs as the session's current results.

        Raises:
            SessionNotFoundException: If the session was closed meanwhile
        """
        handles = self.session_manager.set_results(session_id, outputs)
        if handles is None:
            raise SessionNotFoundException(session_id)
        return [file_result(handle, output) for handle, output in zip(handles, outputs)]


def file_result(handle: str, output: OutputFile) -> FileResult:
    """Describe a registered output file."""
    return FileResult(
        handle=handle,
        filename=output.filename,
        mime_type=output.mime_type,
        size=output.size,
        size_formatted=format_file_size(output.size),
    )
