"""
Writer — serialize a PassReport to JSON.
"""
import json
from pathlib import Path

from crossbuild.io.schema import PassReport


def write_report(report: PassReport, path: Path) -> Path:
    """
    Write *report* to *path* as indented, key-sorted JSON.

    Creates the parent directory if it does not exist.
    Returns the written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            report.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return path
