import json
import os
import shutil
from typing import Any, Dict, List, Tuple

from src.relational_db.errors import StorageError

DATA_DIR = "databases"
METADATA_FILE = "metadata.json"
TABLE_FILE_SUFFIX = ".tab"
PRIMARY_KEY = "id"


def database_path(root: str, database: str) -> str:
    return os.path.join(root, database)


def metadata_path(root: str, database: str) -> str:
    return os.path.join(root, database, METADATA_FILE)


def table_path(db_dir: str, table_name: str) -> str:
    return os.path.join(db_dir, f"{table_name}{TABLE_FILE_SUFFIX}")


def load_metadata(filepath: str) -> Dict[str, Any]:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Failed to read metadata {filepath}: {e}") from e
    if not isinstance(data, dict):
        raise StorageError(f"Malformed metadata in {filepath}")
    return data


def save_metadata(filepath: str, data: Dict[str, Any]) -> None:
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
    except OSError as e:
        raise StorageError(f"Failed to write metadata {filepath}: {e}") from e


def load_table_data(filepath: str) -> Tuple[List[str], List[List[str]]]:
    """Read a tab-separated row file: (header, rows)."""
    try:
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise StorageError(f"Failed to read table file {filepath}: {e}") from e
    if not lines:
        return [], []
    header = lines[0].split("\t")
    rows = [line.split("\t") for line in lines[1:] if line]
    return header, rows


def save_table_data(filepath: str, header: List[str], rows: List[List[str]]) -> None:
    try:
        with open(filepath, "w", encoding="utf-8", newline="") as f:
            f.write("\t".join(header) + "\n")
            for row in rows:
                f.write("\t".join(row) + "\n")
    except OSError as e:
        raise StorageError(f"Failed to write table file {filepath}: {e}") from e


def delete_file(filepath: str) -> None:
    try:
        os.remove(filepath)
    except OSError as e:
        raise StorageError(f"Failed to delete {filepath}: {e}") from e


def delete_directory(path: str) -> None:
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise StorageError(f"Failed to delete {path}: {e}") from e
    if os.path.exists(path):
        raise StorageError(f"Failed to delete {path}")
