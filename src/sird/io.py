"""Run I/O helpers.

Small utilities to create output folders and persist configs, results and
daily series as JSON and CSV. Used by the history store and the scripts.
"""


from pathlib import Path
import csv
import json
import os
import tempfile
from typing import Any, Dict, Iterable, Union


def ensure_dir(path: Union[Path, str]) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save_json(path: Union[Path, str], payload: Any) -> None:
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        # Keep accented chart labels readable in the file.
        json.dump(payload, f, indent=2, sort_keys=True, ensure_ascii=False)


def write_json_atomic(path: Union[Path, str], payload: Any) -> None:
    """Write JSON through a temp file in the same folder, then replace."""
    path = Path(path)
    ensure_dir(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def load_json(path: Union[Path, str], default: Any = None) -> Any:
    path = Path(path)
    if not path.exists():
        return default
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_csv(path: Union[Path, str], rows: Iterable[Dict]) -> None:
    path = Path(path)
    rows = list(rows)
    if not rows:
        # Avoid creating empty CSVs.
        return
    with path.open("w", newline="", encoding="utf-8") as f:
        # Column order follows the first row.
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
