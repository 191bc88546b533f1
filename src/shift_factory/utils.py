import csv
import os
from typing import List, Sequence

from shift_factory.errors import OutputWriteError


def get_file_list(folder_path: str, suffix: str = ".csv") -> List[str]:
    files_list = os.listdir(folder_path)
    files_path = sorted(
        [
            os.path.join(folder_path, file_path)
            for file_path in files_list
            if file_path.lower().endswith(suffix)
        ]
    )
    return files_path


def write_csv_rows(path: str, rows: Sequence[Sequence[str]]) -> None:
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerows(rows)
    except OSError as e:
        raise OutputWriteError(f"Error writing CSV data to {path}: {e}") from e
