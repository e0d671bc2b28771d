"""
Error log for EDFView.

Non-crash failures (EDF decode errors, unreadable files) are appended to a
JSON list at {config_dir}/error_log.json so they can be attached to bug
reports. Decode errors also record their structured details (field,
channel, byte counts) next to the message.

Logging is rate limited per session and deduplicated on type + message.
"""

import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from version_info import VERSION_STRING


MAX_ERRORS_PER_SESSION = 100
MAX_ERROR_LOG_ENTRIES = 500
ERROR_LOG_FILE = "error_log.json"

# Attributes carried by core.domain.recording.errors
DECODE_DETAIL_ATTRS = ('field', 'channel', 'raw', 'value', 'kind',
                       'expected_bytes', 'actual_bytes')


def _error_key(error: Exception) -> str:
    return f"{type(error).__name__}:{str(error)[:100]}"


def _decode_details(error: Exception) -> Optional[Dict]:
    details = {name: getattr(error, name) for name in DECODE_DETAIL_ATTRS
               if hasattr(error, name)}
    return details or None


class ErrorReporter:
    """
    Session-scoped error log writer.

    One instance per process via get_instance(); tests construct their own
    with an explicit config_dir.
    """

    _instance: Optional['ErrorReporter'] = None

    @classmethod
    def get_instance(cls) -> 'ErrorReporter':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            from core.config import get_config_dir
            config_dir = get_config_dir()

        self._config_dir = Path(config_dir)
        self._session_id = uuid.uuid4().hex[:8]
        self._logged = 0
        self._occurrences: Dict[str, int] = {}

    @property
    def error_log_path(self) -> Path:
        return self._config_dir / ERROR_LOG_FILE

    def log_error(self, error: Exception, context: Optional[str] = None,
                  extra_data: Optional[Dict] = None) -> bool:
        """
        Record `error` unless the session quota is used up or it was already seen.

        Args:
            error: exception to record
            context: where it happened, e.g. "edf_decode"
            extra_data: JSON-serialisable extras (file name, ...)

        Returns:
            True if a log entry was written.
        """
        if self._logged >= MAX_ERRORS_PER_SESSION:
            return False

        key = _error_key(error)
        seen = self._occurrences.get(key, 0)
        self._occurrences[key] = seen + 1
        if seen:
            return False

        self._logged += 1
        self._write(self._build_entry(error, context, extra_data))
        return True

    def _build_entry(self, error: Exception, context, extra_data) -> Dict:
        tb = traceback.format_exception(type(error), error, error.__traceback__)
        return {
            "timestamp": datetime.now().isoformat(),
            "session_id": self._session_id,
            "app_version": VERSION_STRING,
            "error_type": type(error).__name__,
            "error_message": str(error)[:500],
            "context": context,
            "decode_details": _decode_details(error),
            "extra_data": extra_data,
            "traceback": "".join(tb)[:2000],
        }

    def read_entries(self) -> List[Dict]:
        """Entries currently on disk; an unreadable log reads as empty."""
        path = self.error_log_path
        if not path.exists():
            return []
        try:
            entries = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            return []
        return entries if isinstance(entries, list) else []

    def _write(self, entry: Dict):
        entries = self.read_entries()
        entries.append(entry)
        try:
            self.error_log_path.write_text(
                json.dumps(entries[-MAX_ERROR_LOG_ENTRIES:], indent=2, default=str),
                encoding='utf-8',
            )
        except OSError as e:
            # The log itself must never take the app down
            print(f"[Error Log] Failed to write {self.error_log_path}: {e}")

    def get_error_count(self) -> int:
        """Entries written this session."""
        return self._logged

    def get_error_summary(self) -> Dict[str, int]:
        """Occurrences per error key this session, including suppressed duplicates."""
        return dict(self._occurrences)


def log_error(error: Exception, context: str = None, extra_data: dict = None) -> bool:
    """Record a non-crash error through the process-wide reporter."""
    return ErrorReporter.get_instance().log_error(error, context, extra_data)
