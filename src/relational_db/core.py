from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from src.relational_db.attributes import AttributeSet
from src.relational_db.errors import (
    AttributeNotFoundError,
    InvalidValueError,
    PrimaryKeyAlterationError,
    RecordNotFoundError,
    StorageError,
)
from src.relational_db.utils import PRIMARY_KEY, load_table_data, save_table_data

Record = Dict[str, str]


@dataclass
class TableSchema:
    """Persisted description of one table; owns the next-id counter."""

    display_name: str
    attributes: AttributeSet = field(default_factory=lambda: AttributeSet([PRIMARY_KEY]))
    primary_key: str = PRIMARY_KEY
    next_primary_key: int = 1

    def allocate_id(self) -> int:
        new_id = self.next_primary_key
        self.next_primary_key += 1
        return new_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalTableName": self.display_name,
            "primaryKey": self.primary_key,
            "nextPrimaryKey": self.next_primary_key,
            "attributes": self.attributes.to_list(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableSchema":
        try:
            return cls(
                display_name=data["originalTableName"],
                attributes=AttributeSet(data["attributes"]),
                primary_key=data.get("primaryKey", PRIMARY_KEY),
                next_primary_key=int(data["nextPrimaryKey"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed table metadata: {e}") from e


class Table:
    """
    In-memory table: the schema plus records keyed by integer id.
    Record keys are the lower-cased attribute names.
    """

    def __init__(self, schema: TableSchema):
        self.schema = schema
        self.records: Dict[int, Record] = {}

    @property
    def attributes(self) -> AttributeSet:
        return self.schema.attributes

    @property
    def display_name(self) -> str:
        return self.schema.display_name

    def ids(self) -> List[int]:
        return sorted(self.records)

    # ---------------- row file ----------------

    def load(self, filepath: str) -> None:
        _header, rows = load_table_data(filepath)
        columns = [a.lower() for a in self.attributes]
        self.records.clear()
        for row in rows:
            # trailing empty cells may be missing
            padded = row + [""] * (len(columns) - len(row))
            record = dict(zip(columns, padded))
            try:
                record_id = int(record[PRIMARY_KEY])
            except ValueError as e:
                raise StorageError(f"Bad id {record[PRIMARY_KEY]!r} in {filepath}") from e
            self.records[record_id] = record

    def save(self, filepath: str) -> None:
        header = self.attributes.to_list()
        columns = [a.lower() for a in header]
        rows = [[self.records[i].get(c, "") for c in columns] for i in self.ids()]
        save_table_data(filepath, header, rows)

    # ---------------- structure ----------------

    def add_attribute(self, name: str) -> None:
        self.attributes.add(name)
        for record in self.records.values():
            record[name.lower()] = ""

    def drop_attribute(self, name: str) -> None:
        if name not in self.attributes:
            raise AttributeNotFoundError(f'Attribute "{name}" does not exist')
        if name.lower() == self.schema.primary_key:
            raise PrimaryKeyAlterationError()
        self.attributes.remove(name)
        for record in self.records.values():
            record.pop(name.lower(), None)

    # ---------------- records ----------------

    def insert(self, values: List[str]) -> int:
        """Map values positionally onto every attribute after id; returns the new id."""
        columns = [a.lower() for a in self.attributes][1:]
        if len(values) != len(columns):
            raise InvalidValueError(
                f"Expected {len(columns)} values, got {len(values)}"
            )
        new_id = self.schema.allocate_id()
        record = {PRIMARY_KEY: str(new_id)}
        record.update(zip(columns, values))
        self.records[new_id] = record
        return new_id

    def add_record(self, record: Record) -> int:
        """Store a record under a freshly allocated id."""
        self._validate_keys(record)
        new_id = self.schema.allocate_id()
        stored = {key.lower(): value for key, value in record.items()}
        stored[PRIMARY_KEY] = str(new_id)
        self.records[new_id] = stored
        return new_id

    def get_record(self, record_id: int) -> Record:
        if record_id not in self.records:
            raise RecordNotFoundError(f"No record with id {record_id}")
        return dict(self.records[record_id])

    def update_record(self, record_id: int, assignments: Dict[str, str]) -> None:
        if record_id not in self.records:
            raise RecordNotFoundError(f"No record with id {record_id}")
        record = self.records[record_id]
        for name, value in assignments.items():
            if name.lower() == self.schema.primary_key:
                raise PrimaryKeyAlterationError()
            if name not in self.attributes:
                raise AttributeNotFoundError(f'Attribute "{name}" does not exist')
            record[name.lower()] = value

    def delete_records(self, ids: Iterable[int]) -> int:
        deleted = 0
        for record_id in ids:
            if self.records.pop(record_id, None) is not None:
                deleted += 1
        return deleted

    def values(self, attribute: str) -> List[str]:
        key = attribute.lower()
        return [self.records[i][key] for i in self.ids()]

    def rows(self, attributes: List[str], ids: Optional[Iterable[int]] = None) -> List[List[str]]:
        keys = [a.lower() for a in attributes]
        selected = self.ids() if ids is None else sorted(i for i in ids if i in self.records)
        return [[self.records[i].get(k, "") for k in keys] for i in selected]

    def _validate_keys(self, record: Record) -> None:
        for key in record:
            if key not in self.attributes:
                raise AttributeNotFoundError(f'Attribute "{key}" does not exist')
