import re
from datetime import datetime, timezone
from pathlib import Path

_TOKEN_MARKER = re.compile(r"\[([^\]]+)\]")


def ensure_dir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def timestamp_digits(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with every non-digit removed (ms precision)."""
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    # Drop the "+00:00" offset so it does not leak "0000" into the name.
    return re.sub(r"\D", "", iso.split("+")[0])


def generate_filename(prefix: str, extension: str, now: datetime | None = None) -> str:
    return f"{prefix}-{timestamp_digits(now)}.{extension}"


def is_within(base_dir: str | Path, path: str | Path) -> bool:
    try:
        return Path(path).resolve().is_relative_to(Path(base_dir).resolve())
    except (ValueError, OSError):
        return False


def find_token_marker(file_name: str) -> str | None:
    match = _TOKEN_MARKER.search(file_name)
    return match.group(1) if match else None


def strip_token_marker(file_name: str) -> str:
    return _TOKEN_MARKER.sub("", file_name, count=1)
