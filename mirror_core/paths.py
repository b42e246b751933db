from pathlib import Path

DEFAULT_LOG_DIR = Path("Data") / "Logs"
