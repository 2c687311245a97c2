"""
Session Manager - Owns per-tool state and the lifecycle of every produced blob
"""

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Sequence

from common.base import OutputFile
from common.constants import SessionConstants
from common.enums import ToolName
from core.raster import Raster

logger = logging.getLogger(__name__)


@dataclass
class BlobEntry:
    """Downloadable bytes behind a handle."""

    handle: str
    data: bytes
    mime_type: str
    filename: str
    created_at: float = field(default_factory=time.time)

    @property
    def size(self) -> int:
        return len(self.data)


class BlobRegistry:
    """
    Stores downloadable blobs behind opaque handles.

    Every handle is released exactly once; releasing an unknown or already
    released handle is a no-op.
    """

    def __init__(self):
        self._blobs: Dict[str, BlobEntry] = {}
        self.lock = Lock()
        self.created_count = 0
        self.released_count = 0

    def create(self, data: bytes, mime_type: str, filename: str) -> str:
        """
        Register bytes and return a new handle.

        Args:
            data: File contents
            mime_type: MIME type served with the download
            filename: Suggested download name

        Returns:
            Handle string
        """
        with self.lock:
            handle = f"{SessionConstants.BLOB_URL_PREFIX}{uuid.uuid4()}"
            self._blobs[handle] = BlobEntry(
                handle=handle, data=data, mime_type=mime_type, filename=filename
            )
            self.created_count += 1
            logger.debug(f"Created blob {handle}: {filename} ({len(data)} bytes)")
            return handle

    def get(self, handle: str) -> Optional[BlobEntry]:
        with self.lock:
            return self._blobs.get(handle)

    def release(self, handle: Optional[str]) -> bool:
        """
        Release a handle.

        Returns:
            True if the handle was live, False otherwise
        """
        if not handle:
            return False
        with self.lock:
            entry = self._blobs.pop(handle, None)
            if entry is None:
                return False
            self.released_count += 1
            logger.debug(f"Released blob {handle}")
            return True

    @property
    def live_count(self) -> int:
        with self.lock:
            return len(self._blobs)

    @property
    def total_bytes(self) -> int:
        with self.lock:
            return sum(entry.size for entry in self._blobs.values())

    def get_stats(self) -> Dict:
        with self.lock:
            return {
                "live_blobs": len(self._blobs),
                "created_blobs": self.created_count,
                "released_blobs": self.released_count,
                "total_size_mb": sum(e.size for e in self._blobs.values()) / (1024 * 1024),
            }


@dataclass
class ToolSession:
    """State of one open tool."""

    session_id: str
    tool: ToolName
    created_at: float = field(default_factory=time.time)
    last_access: float = field(default_factory=time.time)

    # Current source image and its preview blob
    source: Optional[Raster] = None
    source_data: Optional[bytes] = None
    source_mime: Optional[str] = None
    source_filename: Optional[str] = None
    source_handle: Optional[str] = None

    # Secondary image (watermark overlay)
    overlay: Optional[Raster] = None
    overlay_filename: Optional[str] = None
    overlay_handle: Optional[str] = None

    result_handles: List[str] = field(default_factory=list)
    processing: bool = False

    def owned_handles(self) -> List[str]:
        handles = [self.source_handle, self.overlay_handle, *self.result_handles]
        return [h for h in handles if h]

    def to_dict(self) -> Dict:
        return {
            "session_id": self.session_id,
            "tool": self.tool.value,
            "created_at": self.created_at,
            "has_source": self.source is not None,
            "source_filename": self.source_filename,
            "source_mime": self.source_mime,
            "source_size": len(self.source_data) if self.source_data else 0,
            "width": self.source.width if self.source is not None else None,
            "height": self.source.height if self.source is not None else None,
            "source_handle": self.source_handle,
            "has_overlay": self.overlay is not None,
            "overlay_handle": self.overlay_handle,
            "result_handles": list(self.result_handles),
            "processing": self.processing,
        }


class SessionManager:
    """
    Manages tool sessions and releases their blobs when they are replaced
    or closed. Sessions are kept in LRU order; when the limit is reached
    the least recently used idle session is closed.
    """

    def __init__(
        self,
        max_sessions: int = SessionConstants.DEFAULT_MAX_SESSIONS,
        blobs: Optional[BlobRegistry] = None,
    ):
        """
        Initialize Session Manager

        Args:
            max_sessions: Maximum number of open sessions
            blobs: Blob registry (a new one is created if omitted)
        """
        self.max_sessions = max_sessions
        self.blobs = blobs or BlobRegistry()

        self.sessions: OrderedDict = OrderedDict()

        # Thread safety
        self.lock = Lock()

        logger.info(f"Session Manager initialized: max {max_sessions} sessions")

    def create_session(self, tool: ToolName) -> ToolSession:
        """Open a new session for a tool."""
        with self.lock:
            while len(self.sessions) >= self.max_sessions:
                if not self._evict_oldest():
                    raise MemoryError("No idle session available for eviction")

            session = ToolSession(session_id=str(uuid.uuid4()), tool=ToolName(tool))
            self.sessions[session.session_id] = session
            logger.info(f"Created session {session.session_id} for {session.tool.value}")
            return session

    def get_session(self, session_id: str) -> Optional[ToolSession]:
        """Return a session and mark it as recently used, or None."""
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                logger.warning(f"Session {session_id} not found")
                return None
            session.last_access = time.time()
            self.sessions.move_to_end(session_id)
            return session

    def load_source(
        self,
        session_id: str,
        raster: Optional[Raster],
        data: bytes,
        mime_type: str,
        filename: str,
    ) -> Optional[str]:
        """
        Replace the session's source file.

        The previous preview, overlay and results are released.

        Returns:
            Preview handle of the new source, or None if the session is unknown
        """
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                return None

            self._release(session.source_handle, session.overlay_handle, *session.result_handles)

            session.source = raster
            session.source_data = data
            session.source_mime = mime_type
            session.source_filename = filename
            session.source_handle = self.blobs.create(data, mime_type, filename)
            session.overlay = None
            session.overlay_filename = None
            session.overlay_handle = None
            session.result_handles = []
            session.last_access = time.time()

            logger.debug(f"Loaded source {filename} into session {session_id}")
            return session.source_handle

    def load_overlay(
        self, session_id: str, raster: Raster, data: bytes, mime_type: str, filename: str
    ) -> Optional[str]:
        """
        Replace the session's overlay image.

        Returns:
            Preview handle of the overlay, or None if the session is unknown
        """
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                return None

            self._release(session.overlay_handle)
            session.overlay = raster
            session.overlay_filename = filename
            session.overlay_handle = self.blobs.create(data, mime_type, filename)
            session.last_access = time.time()
            return session.overlay_handle

    def set_results(self, session_id: str, outputs: Sequence[OutputFile]) -> Optional[List[str]]:
        """
        Register new result files, releasing the results they supersede.

        Returns:
            New result handles, or None if the session is unknown
        """
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None:
                return None

            self._release(*session.result_handles)
            session.result_handles = [
                self.blobs.create(output.data, output.mime_type, output.filename)
                for output in outputs
            ]
            session.last_access = time.time()
            return list(session.result_handles)

    def begin_processing(self, session_id: str) -> bool:
        """
        Mark a session busy.

        Returns:
            False if the session is unknown or already processing
        """
        with self.lock:
            session = self.sessions.get(session_id)
            if session is None or session.processing:
                return False
            session.processing = True
            return True

    def end_processing(self, session_id: str) -> None:
        with self.lock:
            session = self.sessions.get(session_id)
            if session is not None:
                session.processing = False

    def close_session(self, session_id: str) -> bool:
        """
        Close a session and release every blob it owns.

        Returns:
            True if closed, False if not found
        """
        with self.lock:
            return self._close(session_id)

    def _close(self, session_id: str) -> bool:
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        self._release(*session.owned_handles())
        logger.info(f"Closed session {session_id}")
        return True

    def _release(self, *handles: Optional[str]) -> None:
        for handle in handles:
            self.blobs.release(handle)

    def _evict_oldest(self) -> bool:
        """Close the least recently used idle session"""
        for session_id, session in list(self.sessions.items()):
            if not session.processing:
                logger.info(f"Evicting idle session {session_id}")
                return self._close(session_id)
        return False

    def get_stats(self) -> Dict:
        """Get session and blob statistics"""
        with self.lock:
            stats = {
                "total_sessions": len(self.sessions),
                "max_sessions": self.max_sessions,
                "processing_sessions": sum(1 for s in self.sessions.values() if s.processing),
            }
        stats.update(self.blobs.get_stats())
        return stats

    def cleanup(self):
        """Close all sessions"""
        with self.lock:
            logger.info("Cleaning up Session Manager...")

            for session_id in list(self.sessions.keys()):
                self._close(session_id)

            logger.info("Session Manager cleanup complete")
