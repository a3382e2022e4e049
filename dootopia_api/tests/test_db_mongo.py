import unittest
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo.errors import WriteError

from dootopia_api.db import USERS, MongoDbClient
from dootopia_api.documents import InvalidDocumentId, InvalidUpdate


class MongoDbClientTests(unittest.TestCase):
    """
    Exercises the pymongo calls against a mocked client; no server needed.
    """

    def setUp(self):
        self.mongo = MagicMock()
        self.collection = self.mongo["dootopia"][USERS]
        self.db = MongoDbClient("mongodb://unused", "dootopia", client=self.mongo)

    def test_insert_returns_string_id(self):
        oid = ObjectId()
        self.collection.insert_one.return_value = MagicMock(inserted_id=oid)
        doc = self.db.insert_document(USERS, {"_id": "ignored", "name": "Ada"})
        self.assertEqual(doc, {"name": "Ada", "_id": str(oid)})
        self.assertEqual(self.collection.insert_one.call_args.args[0], {"name": "Ada"})

    def test_get_converts_ids(self):
        oid = ObjectId()
        self.collection.find_one.return_value = {"_id": oid, "name": "Ada"}
        doc = self.db.get_document(USERS, str(oid))
        self.assertEqual(doc["_id"], str(oid))
        self.collection.find_one.assert_called_once_with({"_id": oid})

    def test_invalid_id(self):
        with self.assertRaises(InvalidDocumentId):
            self.db.get_document(USERS, "not-an-id")
        with self.assertRaises(InvalidDocumentId):
            self.db.delete_document(USERS, "123")

    def test_update_reports_counts(self):
        oid = ObjectId()
        self.collection.update_one.return_value = MagicMock(
            matched_count=1, modified_count=0
        )
        result = self.db.update_document(USERS, str(oid), {"$set": {"name": "x"}})
        self.assertEqual((result.matched_count, result.modified_count), (1, 0))
        self.collection.update_one.assert_called_once_with(
            {"_id": oid}, {"$set": {"name": "x"}}
        )

    def test_write_error_becomes_invalid_update(self):
        self.collection.update_one.side_effect = WriteError(
            "Cannot apply $inc to a value of non-numeric type", code=14
        )
        with self.assertRaises(InvalidUpdate):
            self.db.update_document(
                USERS, str(ObjectId()), {"$inc": {"points": 1}}
            )

    def test_find_passes_filters(self):
        oid = ObjectId()
        self.collection.find.return_value = [{"_id": oid, "email": "a@b.c"}]
        docs = self.db.find_documents(USERS, {"email": "a@b.c"})
        self.assertEqual(docs, [{"_id": str(oid), "email": "a@b.c"}])
        self.collection.find.assert_called_once_with({"email": "a@b.c"})


if __name__ == "__main__":
    unittest.main()
