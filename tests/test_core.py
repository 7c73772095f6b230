import os
import tempfile
import unittest

from src.relational_db.attributes import AttributeSet
from src.relational_db.core import Table, TableSchema
from src.relational_db.errors import (
    AttributeNotFoundError,
    InvalidValueError,
    PrimaryKeyAlterationError,
    RecordNotFoundError,
    StorageError,
)


def make_table(*attributes):
    return Table(TableSchema("People", AttributeSet(["id", *attributes])))


class TestTableSchema(unittest.TestCase):

    def test_allocate_id_is_monotonic(self):
        schema = TableSchema("t")
        self.assertEqual([schema.allocate_id() for _ in range(3)], [1, 2, 3])
        self.assertEqual(schema.next_primary_key, 4)

    def test_to_dict(self):
        schema = TableSchema("People", AttributeSet(["id", "Name"]), next_primary_key=7)
        self.assertEqual(
            schema.to_dict(),
            {
                "originalTableName": "People",
                "primaryKey": "id",
                "nextPrimaryKey": 7,
                "attributes": ["id", "Name"],
            },
        )
        self.assertEqual(TableSchema.from_dict(schema.to_dict()), schema)

    def test_from_dict_rejects_malformed(self):
        with self.assertRaises(StorageError):
            TableSchema.from_dict({"attributes": ["id"]})
        with self.assertRaises(StorageError):
            TableSchema.from_dict(
                {"originalTableName": "t", "attributes": ["id"], "nextPrimaryKey": "x"}
            )


class TestTableRecords(unittest.TestCase):

    def setUp(self):
        self.table = make_table("Name", "Age")
        self.table.insert(["Alice", "30"])
        self.table.insert(["Bob", "21"])

    def test_insert_maps_values_positionally(self):
        self.assertEqual(self.table.get_record(1), {"id": "1", "name": "Alice", "age": "30"})
        self.assertEqual(self.table.rows(["id", "Name"]), [["1", "Alice"], ["2", "Bob"]])

    def test_insert_value_count(self):
        with self.assertRaises(InvalidValueError):
            self.table.insert(["Carol"])
        with self.assertRaises(InvalidValueError):
            self.table.insert(["Carol", "40", "extra"])
        self.assertEqual(self.table.schema.next_primary_key, 3)

    def test_ids_not_reused_after_delete(self):
        self.assertEqual(self.table.delete_records([2, 99]), 1)
        self.assertEqual(self.table.insert(["Carol", "40"]), 3)
        self.assertEqual(self.table.ids(), [1, 3])

    def test_update_record(self):
        self.table.update_record(2, {"age": "22", "NAME": "Robert"})
        self.assertEqual(self.table.get_record(2), {"id": "2", "name": "Robert", "age": "22"})
        self.assertEqual(self.table.get_record(1), {"id": "1", "name": "Alice", "age": "30"})

    def test_update_record_errors(self):
        with self.assertRaises(PrimaryKeyAlterationError):
            self.table.update_record(1, {"id": "5"})
        with self.assertRaises(AttributeNotFoundError):
            self.table.update_record(1, {"email": "x"})
        with self.assertRaises(RecordNotFoundError):
            self.table.update_record(42, {"age": "1"})

    def test_get_record_missing(self):
        with self.assertRaises(RecordNotFoundError):
            self.table.get_record(42)

    def test_add_record_assigns_fresh_id(self):
        new_id = self.table.add_record({"id": "100", "Name": "Dan", "age": "50"})
        self.assertEqual(new_id, 3)
        self.assertEqual(self.table.get_record(3), {"id": "3", "name": "Dan", "age": "50"})
        with self.assertRaises(AttributeNotFoundError):
            self.table.add_record({"email": "x"})

    def test_values_in_id_order(self):
        self.assertEqual(self.table.values("AGE"), ["30", "21"])


class TestTableStructure(unittest.TestCase):

    def setUp(self):
        self.table = make_table("Name", "Age")
        self.table.insert(["Alice", "30"])

    def test_add_attribute_backfills_empty(self):
        self.table.add_attribute("Email")
        self.assertEqual(self.table.attributes.to_list(), ["id", "Name", "Age", "Email"])
        self.assertEqual(self.table.get_record(1)["email"], "")

    def test_drop_attribute(self):
        self.table.drop_attribute("age")
        self.assertEqual(self.table.attributes.to_list(), ["id", "Name"])
        self.assertEqual(self.table.get_record(1), {"id": "1", "name": "Alice"})

    def test_drop_primary_key_fails(self):
        with self.assertRaises(PrimaryKeyAlterationError):
            self.table.drop_attribute("ID")
        self.assertIn("id", self.table.attributes)

    def test_drop_unknown_attribute(self):
        with self.assertRaises(AttributeNotFoundError):
            self.table.drop_attribute("email")


class TestRowFile(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "people.tab")

    def tearDown(self):
        self.tmp.cleanup()

    def test_save_writes_tab_separated_rows(self):
        table = make_table("Name", "Age")
        table.insert(["Alice", "30"])
        table.insert(["Bob", ""])
        table.save(self.path)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(f.read(), "id\tName\tAge\n1\tAlice\t30\n2\tBob\t\n")

    def test_load_pads_short_rows(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("id\tName\tAge\n3\tCarol\n\n1\tAlice\t30\n")
        table = make_table("Name", "Age")
        table.load(self.path)
        self.assertEqual(table.ids(), [1, 3])
        self.assertEqual(table.get_record(3), {"id": "3", "name": "Carol", "age": ""})

    def test_load_rejects_bad_id(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("id\tName\nabc\tAlice\n")
        with self.assertRaises(StorageError):
            make_table("Name").load(self.path)

    def test_load_missing_file(self):
        with self.assertRaises(StorageError):
            make_table("Name").load(os.path.join(self.tmp.name, "missing.tab"))


if __name__ == "__main__":
    unittest.main()
