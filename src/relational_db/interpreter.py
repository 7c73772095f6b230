import logging
from dataclasses import dataclass
from typing import List, Optional

from src.relational_db.ast_nodes import (
    AddAttribute,
    Command,
    CreateDatabase,
    CreateTable,
    Delete,
    DropAttribute,
    DropDatabase,
    DropTable,
    Insert,
    Join,
    Select,
    Update,
    Use,
    WildAttributeList,
)
from src.relational_db.attributes import AttributeSet
from src.relational_db.conditions import evaluate
from src.relational_db.core import Table, TableSchema
from src.relational_db.errors import AttributeNotFoundError, NoDatabaseInUseError
from src.relational_db.storage import Catalog, Database
from src.relational_db.utils import PRIMARY_KEY

logger = logging.getLogger(__name__)


@dataclass
class ResultSet:
    """Tabular payload of SELECT and JOIN."""

    attributes: List[str]
    rows: List[List[str]]


class Interpreter:
    """Executes parsed commands against a Catalog. Mutating commands end with a full save."""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def execute(self, command: Command) -> Optional[ResultSet]:
        match command:
            case Use(database=name):
                self.catalog.use_database(name)
            case CreateDatabase(database=name):
                self.catalog.create_database(name)
            case DropDatabase(database=name):
                self.catalog.delete_database(name)
            case CreateTable(table=name, attributes=attributes, display_name=display_name):
                self._database().create_table(display_name or name, attributes.names)
                self.catalog.save_database()
            case DropTable(table=name):
                self._database().drop_table(name)
                self.catalog.save_database()
            case AddAttribute(table=name, attribute=attribute):
                self._database().add_attribute(name, attribute)
                self.catalog.save_database()
            case DropAttribute(table=name, attribute=attribute):
                self._database().drop_attribute(name, attribute)
                self.catalog.save_database()
            case Insert():
                self._insert(command)
            case Select():
                return self._select(command)
            case Delete():
                self._delete(command)
            case Update():
                self._update(command)
            case Join():
                return self._join(command)
            case _:
                raise TypeError(f"Unsupported command: {command!r}")
        return None

    def _database(self) -> Database:
        if self.catalog.database is None:
            raise NoDatabaseInUseError()
        return self.catalog.database

    # ---------------- data manipulation ----------------

    def _insert(self, command: Insert) -> None:
        table = self._database().load_table(command.table)
        new_id = table.insert(list(command.values.values))
        self.catalog.save_database()
        logger.debug("Inserted record %d into %s", new_id, command.table)

    def _select(self, command: Select) -> ResultSet:
        table = self._database().load_table(command.table)
        attributes = self._resolve_attributes(command.attributes, table)
        if command.condition is None:
            ids = table.ids()
        else:
            ids = evaluate(command.condition, table)
        return ResultSet(attributes, table.rows(attributes, ids))

    def _delete(self, command: Delete) -> None:
        table = self._database().load_table(command.table)
        ids = evaluate(command.condition, table)
        deleted = table.delete_records(ids)
        self.catalog.save_database()
        logger.debug("Deleted %d records from %s", deleted, command.table)

    def _update(self, command: Update) -> None:
        table = self._database().load_table(command.table)
        ids = evaluate(command.condition, table)
        # No rollback: a bad assignment can fail after earlier records changed in memory.
        for record_id in sorted(ids):
            table.update_record(record_id, command.assignments)
        self.catalog.save_database()
        logger.debug("Updated %d records in %s", len(ids), command.table)

    @staticmethod
    def _resolve_attributes(requested: WildAttributeList, table: Table) -> List[str]:
        if requested.wildcard:
            return table.attributes.to_list()
        resolved: List[str] = []
        seen = set()
        for name in requested.names:
            if name not in table.attributes:
                raise AttributeNotFoundError(f'Attribute "{name}" does not exist')
            if name.lower() not in seen:
                seen.add(name.lower())
                resolved.append(table.attributes.canonical(name))
        return resolved

    # ---------------- join ----------------

    def _join(self, command: Join) -> ResultSet:
        database = self._database()
        left = database.load_table(command.left_table)
        right = database.load_table(command.right_table)
        if command.left_attribute not in left.attributes:
            raise AttributeNotFoundError(f'Attribute "{command.left_attribute}" does not exist')
        if command.right_attribute not in right.attributes:
            raise AttributeNotFoundError(f'Attribute "{command.right_attribute}" does not exist')

        result = self._join_tables(left, right, command.left_attribute, command.right_attribute)
        attributes = result.attributes.to_list()
        return ResultSet(attributes, result.rows(attributes))

    @staticmethod
    def _join_tables(left: Table, right: Table, left_on: str, right_on: str) -> Table:
        """Nested-loop equi-join on exact string equality; the result is never persisted."""

        def carried(table: Table, join_attribute: str) -> List[str]:
            skip = {PRIMARY_KEY, join_attribute.lower()}
            return [a for a in table.attributes if a.lower() not in skip]

        left_columns = carried(left, left_on)
        right_columns = carried(right, right_on)

        columns = AttributeSet([PRIMARY_KEY])
        for a in left_columns:
            columns.add(f"{left.display_name}.{a}")
        for a in right_columns:
            columns.add(f"{right.display_name}.{a}")
        result = Table(TableSchema(display_name="join", attributes=columns))

        for left_id in left.ids():
            left_record = left.records[left_id]
            for right_id in right.ids():
                right_record = right.records[right_id]
                if left_record[left_on.lower()] != right_record[right_on.lower()]:
                    continue
                merged = {f"{left.display_name}.{a}": left_record[a.lower()] for a in left_columns}
                merged.update(
                    {f"{right.display_name}.{a}": right_record[a.lower()] for a in right_columns}
                )
                result.add_record(merged)
        return result
