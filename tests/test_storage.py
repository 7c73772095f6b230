import json
import os
import tempfile
import unittest

from src.relational_db.errors import (
    DatabaseNotFoundError,
    DuplicateAttributeError,
    DuplicateDatabaseError,
    DuplicateTableError,
    StorageError,
    TableNotFoundError,
)
from src.relational_db.storage import Catalog


class StorageTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = self.tmp.name
        self.catalog = Catalog(self.root)

    def tearDown(self):
        self.tmp.cleanup()

    def read_metadata(self, database):
        with open(os.path.join(self.root, database, "metadata.json"), encoding="utf-8") as f:
            return json.load(f)


class TestCatalog(StorageTestCase):

    def test_create_database_writes_empty_metadata(self):
        self.catalog.create_database("school")
        self.assertTrue(self.catalog.database_exists("school"))
        self.assertEqual(self.read_metadata("school"), {"tables": {}})

    def test_create_existing_database(self):
        self.catalog.create_database("school")
        with self.assertRaises(DuplicateDatabaseError):
            self.catalog.create_database("school")

    def test_use_missing_database(self):
        with self.assertRaises(DatabaseNotFoundError):
            self.catalog.use_database("nowhere")
        self.assertIsNone(self.catalog.database)

    def test_use_switches_database(self):
        self.catalog.create_database("a")
        self.catalog.create_database("b")
        self.catalog.use_database("a")
        self.catalog.database.create_table("t", [])
        self.catalog.use_database("b")
        self.assertEqual(self.catalog.database_name, "b")
        self.assertFalse(self.catalog.database.has_table("t"))
        self.assertIn("t", self.read_metadata("a")["tables"])

    def test_delete_database_in_use(self):
        self.catalog.create_database("school")
        self.catalog.use_database("school")
        self.catalog.delete_database("school")
        self.assertIsNone(self.catalog.database)
        self.assertIsNone(self.catalog.database_name)
        self.assertFalse(os.path.exists(os.path.join(self.root, "school")))

    def test_delete_missing_database(self):
        with self.assertRaises(DatabaseNotFoundError):
            self.catalog.delete_database("nowhere")

    def test_close_without_database_is_noop(self):
        self.catalog.close_database()
        self.catalog.save_database()
        self.assertIsNone(self.catalog.database)

    def test_corrupt_metadata(self):
        self.catalog.create_database("school")
        with open(os.path.join(self.root, "school", "metadata.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertRaises(StorageError):
            self.catalog.use_database("school")


class TestDatabase(StorageTestCase):

    def setUp(self):
        super().setUp()
        self.catalog.create_database("school")
        self.database = self.catalog.use_database("school")

    def test_create_table(self):
        self.database.create_table("People", ["Name", "Age"])
        self.database.save()

        with open(os.path.join(self.root, "school", "people.tab"), encoding="utf-8") as f:
            self.assertEqual(f.read(), "id\tName\tAge\n")
        self.assertEqual(
            self.read_metadata("school"),
            {
                "tables": {
                    "people": {
                        "originalTableName": "People",
                        "primaryKey": "id",
                        "nextPrimaryKey": 1,
                        "attributes": ["id", "Name", "Age"],
                    }
                }
            },
        )

    def test_create_table_errors(self):
        self.database.create_table("people", ["name"])
        with self.assertRaises(DuplicateTableError):
            self.database.create_table("PEOPLE", [])
        with self.assertRaises(DuplicateAttributeError):
            self.database.create_table("marks", ["mark", "Mark"])
        with self.assertRaises(DuplicateAttributeError):
            self.database.create_table("grades", ["id", "grade"])
        self.assertFalse(self.database.has_table("marks"))

    def test_tables_load_lazily(self):
        self.database.create_table("people", ["name"])
        self.database.load_table("people").insert(["Alice"])
        self.catalog.close_database()

        database = self.catalog.use_database("school")
        self.assertEqual(database.tables, {"people": None})
        self.assertEqual(database.loaded_tables(), {})
        table = database.load_table("People")
        self.assertEqual(table.rows(["id", "name"]), [["1", "Alice"]])
        self.assertEqual(table.schema.next_primary_key, 2)
        self.assertIs(database.load_table("people"), table)

    def test_load_missing_table(self):
        with self.assertRaises(TableNotFoundError):
            self.database.load_table("ghosts")

    def test_drop_table_removes_file(self):
        self.database.create_table("people", [])
        self.database.drop_table("People")
        self.database.save()
        self.assertFalse(os.path.exists(os.path.join(self.root, "school", "people.tab")))
        self.assertEqual(self.read_metadata("school"), {"tables": {}})
        with self.assertRaises(TableNotFoundError):
            self.database.drop_table("people")

    def test_alter_table(self):
        self.database.create_table("people", ["name"])
        self.database.add_attribute("people", "Age")
        self.database.drop_attribute("people", "name")
        self.assertEqual(self.database.load_table("people").attributes.to_list(), ["id", "Age"])


if __name__ == "__main__":
    unittest.main()
