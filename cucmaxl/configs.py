from pathlib import Path

LOG_DIR: Path = Path.home() / ".cucmaxl" / "logs"

KEYRING_SERVICE: str = "cucmaxl"
