"""Editor settings for Mindtree."""

import json
import logging
from typing import Optional, Any
from dataclasses import dataclass, asdict, fields

from mindtree.model import DEFAULT_COLOR, NEW_NODE_LABEL
from mindtree.sanitize import is_valid_color

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """Tunable editor behaviour."""
    history_limit: int = 50
    new_node_label: str = NEW_NODE_LABEL
    default_color: str = DEFAULT_COLOR
    fallback_label: str = "node"
    max_label_length: int = 200
    copy_suffix: str = " (copy)"
    font: str = "12px sans-serif"

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def _accepts(default: Any, value: Any) -> bool:
        if isinstance(default, int):
            # Limits must be positive ints; bool is not an int here
            return isinstance(value, int) and not isinstance(value, bool) and value > 0
        return isinstance(value, type(default))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "EditorSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
        except (json.JSONDecodeError, TypeError):
            return cls()
        if not isinstance(d, dict):
            return cls()

        # Unknown keys are dropped for schema evolution; mistyped ones keep the default
        defaults = cls()
        values = {}
        for f in fields(cls):
            if f.name not in d:
                continue
            ok = cls._accepts(getattr(defaults, f.name), d[f.name])
            if f.name == "default_color":
                ok = is_valid_color(d[f.name])
            if ok:
                values[f.name] = d[f.name]
            else:
                logger.warning("Ignoring setting %s=%r", f.name, d[f.name])
        return cls(**values)
