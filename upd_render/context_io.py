import json
import logging
from pathlib import Path
from typing import Union

from .context import DocumentContext
from .errors import ContextError

logger = logging.getLogger(__name__)


def load_context(path: Union[str, Path]) -> DocumentContext:
    """Read a document context prepared by data assembly from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.exception("Ошибка загрузки контекста документа %s", path)
        raise ContextError(f"Cannot read document context {path}: {exc}") from exc
    return DocumentContext.from_mapping(data)
