from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)


class ReportSink:
    """Destination for raw report data.

    Without a results directory the sink is console-only and raw data is
    dropped. Write failures are logged and reported as ``False``; they never
    abort the caller.
    """

    def __init__(self, results_dir: str | os.PathLike[str] | None = None):
        self.results_dir = Path(results_dir).expanduser() if results_dir else None

    @property
    def writes_files(self) -> bool:
        return self.results_dir is not None

    def path_for(self, file_name: str) -> Path | None:
        if self.results_dir is None:
            return None
        return self.results_dir / file_name

    def write_text(self, file_name: str, text: str) -> bool:
        path = self.path_for(file_name)
        if path is None:
            return False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
                if not text.endswith("\n"):
                    f.write("\n")
        except OSError:
            logger.exception("Failed to write report file %s", path)
            return False
        logger.debug("Wrote %s", path)
        return True

    def write_documents(self, file_name: str, documents: Iterable[object]) -> bool:
        return self.write_text(file_name, "\n".join(str(d) for d in documents))
