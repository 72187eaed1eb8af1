"""
Command-line launcher for the research tracker.

Starts the Streamlit UI defined in ``app.py``:

```
python -m research_tracker.frontend.main
```

The port defaults to 8000 and can be changed with ``STREAMLIT_PORT``.
``LOG_LEVEL`` controls the verbosity of the backend loggers.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def run_ui() -> int:
    """Start the Streamlit UI and return its exit code."""
    app_path = Path(__file__).parent / "app.py"
    port = os.getenv("STREAMLIT_PORT", "8000")
    logger.info(f"Starting research tracker UI on port {port}")
    completed = subprocess.run([
        sys.executable,
        "-m",
        "streamlit",
        "run",
        str(app_path),
        "--server.port",
        port,
    ])
    return completed.returncode


def main() -> None:
    """Entry point for the ``research-tracker`` console script."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run_ui())


if __name__ == "__main__":
    main()
