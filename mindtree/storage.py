"""JSON file storage for Mindtree sessions, settings and exports."""

import json
import logging
import os
from pathlib import Path
from dataclasses import asdict
from typing import Optional, Any

from mindtree.sanitize import ImportValidationError
from mindtree.session import EditorSession, RestoreError
from mindtree.settings import EditorSettings

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "MINDTREE_DATA_DIR"


def get_data_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        data_dir = Path(override).expanduser()
    else:
        data_dir = Path.home() / ".local" / "share" / "mindtree"
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "exports").mkdir(exist_ok=True)
    return data_dir


def get_session_path() -> Path:
    """Get the session file path."""
    return get_data_dir() / "session.json"


def get_settings_path() -> Path:
    return get_data_dir() / "settings.json"


def get_export_dir() -> Path:
    return get_data_dir() / "exports"


def _write_json(path: Path, payload: Any, indent: Optional[int] = None):
    """Write via a temp file so a crash never leaves half a file behind."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(payload, indent=indent, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, path)


def load_settings(path: Optional[Path] = None) -> EditorSettings:
    path = path or get_settings_path()
    if not path.exists():
        return EditorSettings()
    return EditorSettings.from_json(path.read_text(encoding="utf-8"))


def save_settings(settings: EditorSettings, path: Optional[Path] = None):
    path = path or get_settings_path()
    _write_json(path, asdict(settings))


def save_session(session: EditorSession, path: Optional[Path] = None) -> Path:
    """Persist tree, id counter and selection."""
    path = path or get_session_path()
    _write_json(path, session.serialize())
    logger.debug("Saved session to %s", path)
    return path


def load_session(path: Optional[Path] = None, settings: Optional[EditorSettings] = None,
                 strict: bool = False) -> EditorSession:
    """Load the stored session.

    A missing file gives a fresh session. An unreadable one raises
    RestoreError when `strict`, otherwise it is logged and a fresh session
    is returned so the editor can still start.
    """
    path = path or get_session_path()
    settings = settings or EditorSettings()
    if not path.exists():
        return EditorSession(settings=settings)
    try:
        return EditorSession.from_blob(path.read_text(encoding="utf-8"), settings)
    except (RestoreError, UnicodeDecodeError) as exc:
        if strict:
            if isinstance(exc, RestoreError):
                raise
            raise RestoreError(f"cannot read {path}: {exc}") from exc
        logger.warning("Ignoring unreadable session file %s: %s", path, exc)
        return EditorSession(settings=settings)


def export_tree(session: EditorSession, filepath: Path) -> Path:
    """Write the tree alone as indented JSON, the download format."""
    filepath = Path(filepath).expanduser()
    _write_json(filepath, session.serialize()["data"], indent=2)
    logger.info("Exported tree to %s", filepath)
    return filepath


def import_file(session: EditorSession, filepath: Path):
    """Replace the session's tree with the contents of a JSON file.

    Raises ImportValidationError when the file is not valid JSON or has no
    object at the root; the session keeps its previous tree in that case.
    """
    filepath = Path(filepath).expanduser()
    try:
        data = json.loads(filepath.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ImportValidationError(f"{filepath} is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ImportValidationError(f"{filepath} is nested too deeply") from exc
    return session.import_tree(data)
