"""
Storage layer: one directory per database, holding `metadata.json` and one
`<table>.tab` row file per table.

Catalog is the storage session: it knows the root directory and which
database (if any) is in use. Database owns the tables of the open database
and loads each one lazily on first reference.
"""

import logging
import os
from typing import Dict, Iterable, Optional

from src.relational_db.attributes import AttributeSet
from src.relational_db.core import Table, TableSchema
from src.relational_db.errors import (
    DatabaseNotFoundError,
    DuplicateAttributeError,
    DuplicateDatabaseError,
    DuplicateTableError,
    StorageError,
    TableNotFoundError,
)
from src.relational_db.utils import (
    DATA_DIR,
    METADATA_FILE,
    PRIMARY_KEY,
    database_path,
    delete_directory,
    delete_file,
    load_metadata,
    metadata_path,
    save_metadata,
    table_path,
)

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, path: str, schemas: Dict[str, TableSchema]):
        self.path = path
        self.schemas = schemas
        # None marks a table that is registered but not loaded yet
        self.tables: Dict[str, Optional[Table]] = {name: None for name in schemas}

    def has_table(self, name: str) -> bool:
        return name.lower() in self.tables

    def loaded_tables(self) -> Dict[str, Table]:
        return {name: t for name, t in self.tables.items() if t is not None}

    def load_table(self, name: str) -> Table:
        key = name.lower()
        if key not in self.tables:
            raise TableNotFoundError(f'Table "{name}" does not exist')
        table = self.tables[key]
        if table is None:
            table = Table(self.schemas[key])
            table.load(table_path(self.path, key))
            self.tables[key] = table
            logger.debug("Loaded table %s (%d records)", key, len(table.records))
        return table

    def save_table(self, name: str) -> None:
        key = name.lower()
        if key not in self.tables:
            raise TableNotFoundError(f'Table "{name}" does not exist')
        table = self.tables[key]
        if table is not None:
            table.save(table_path(self.path, key))

    def create_table(self, name: str, attributes: Iterable[str]) -> Table:
        key = name.lower()
        if key in self.tables:
            raise DuplicateTableError(f'Table "{name}" already exists')
        columns = AttributeSet([PRIMARY_KEY])
        for attribute in attributes:
            if attribute in columns:
                raise DuplicateAttributeError("Table creation failed: attribute names must be unique")
            columns.add(attribute)

        schema = TableSchema(display_name=name, attributes=columns)
        table = Table(schema)
        self.schemas[key] = schema
        self.tables[key] = table
        table.save(table_path(self.path, key))
        logger.info("Created table %s with attributes %s", key, columns.to_list())
        return table

    def drop_table(self, name: str) -> None:
        key = name.lower()
        if key not in self.tables:
            raise TableNotFoundError(f'Table "{name}" does not exist')
        del self.schemas[key]
        del self.tables[key]
        delete_file(table_path(self.path, key))
        logger.info("Dropped table %s", key)

    def add_attribute(self, table_name: str, attribute: str) -> None:
        self.load_table(table_name).add_attribute(attribute)

    def drop_attribute(self, table_name: str, attribute: str) -> None:
        self.load_table(table_name).drop_attribute(attribute)

    def metadata(self) -> Dict[str, Dict]:
        return {"tables": {name: schema.to_dict() for name, schema in self.schemas.items()}}

    def save(self) -> None:
        save_metadata(os.path.join(self.path, METADATA_FILE), self.metadata())
        for name in self.loaded_tables():
            self.save_table(name)
        logger.debug("Saved database %s", self.path)


class Catalog:
    """Storage session over the directory `root`; at most one database in use."""

    def __init__(self, root: str = DATA_DIR):
        self.root = root
        self.database_name: Optional[str] = None
        self.database: Optional[Database] = None

    def database_exists(self, name: str) -> bool:
        directory = database_path(self.root, name)
        return os.path.isdir(directory) and os.path.isfile(metadata_path(self.root, name))

    def create_database(self, name: str) -> None:
        if self.database_exists(name):
            raise DuplicateDatabaseError(f'Database "{name}" already exists')
        try:
            os.makedirs(database_path(self.root, name), exist_ok=True)
        except OSError as e:
            raise StorageError(f'Failed to create database "{name}": {e}') from e
        save_metadata(metadata_path(self.root, name), {"tables": {}})
        logger.info("Created database %s", name)

    def use_database(self, name: str) -> Database:
        if not self.database_exists(name):
            raise DatabaseNotFoundError(f'Database "{name}" does not exist')
        self.close_database()

        data = load_metadata(metadata_path(self.root, name))
        schemas = {
            table.lower(): TableSchema.from_dict(desc)
            for table, desc in (data.get("tables") or {}).items()
        }
        self.database = Database(database_path(self.root, name), schemas)
        self.database_name = name
        logger.info("Using database %s (%d tables)", name, len(schemas))
        return self.database

    def delete_database(self, name: str) -> None:
        directory = database_path(self.root, name)
        if not os.path.exists(directory):
            raise DatabaseNotFoundError(f'Database "{name}" does not exist')
        if self.database_name == name:
            # unload without saving; the files are about to go
            self.database_name = None
            self.database = None
        delete_directory(directory)
        logger.info("Deleted database %s", name)

    def save_database(self) -> None:
        if self.database is None:
            return
        self.database.save()

    def close_database(self) -> None:
        if self.database is None:
            return
        self.save_database()
        logger.info("Closed database %s", self.database_name)
        self.database_name = None
        self.database = None
