import json
import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud  # noqa: E402
from db import database as db_database  # noqa: E402
from db import store  # noqa: E402
from db.models import Store  # noqa: E402
from utils.state import AppState  # noqa: E402


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point storage to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    async def assertSeeded(self, loaded: Store):
        self.assertEqual(loaded, store.seed_store())
        raw = await db_database.get_item(store.STORAGE_KEY)
        self.assertIsNotNone(raw)
        self.assertEqual(Store.from_dict(json.loads(raw)), store.seed_store())

    # ---------- Seeding & corruption ----------

    async def test_load_seeds_when_absent(self):
        loaded = await store.load()
        await self.assertSeeded(loaded)
        self.assertEqual(len(loaded.accounts), 1)
        admin = loaded.accounts[0]
        self.assertEqual(admin.role, "admin")
        self.assertTrue(admin.verified)
        self.assertEqual([d.id for d in loaded.departments], [1, 2])
        self.assertEqual(loaded.employees, [])
        self.assertEqual(loaded.requests, [])

    async def test_load_replaces_unparsable_document(self):
        await db_database.set_item(store.STORAGE_KEY, "{not json")
        await self.assertSeeded(await store.load())

    async def test_load_replaces_structurally_wrong_documents(self):
        seed = store.seed_store().to_dict()
        bad_docs = [
            [],
            {"accounts": []},
            {**seed, "accounts": "nope"},
            {**seed, "accounts": [{**seed["accounts"][0], "role": "root"}]},
            {**seed, "departments": [{"id": "1", "name": "X", "description": ""}]},
            {
                **seed,
                "requests": [
                    {
                        "id": 1,
                        "type": "Equipment",
                        "items": [{"name": "Pen", "qty": 0}],
                        "status": "Pending",
                        "date": "2025-01-01T00:00:00",
                        "employeeEmail": "admin@example.com",
                    }
                ],
            },
        ]
        for doc in bad_docs:
            with self.subTest(doc=doc):
                await db_database.set_item(store.STORAGE_KEY, json.dumps(doc))
                await self.assertSeeded(await store.load())

    async def test_bool_is_not_accepted_as_id(self):
        seed = store.seed_store().to_dict()
        seed["departments"][0]["id"] = True
        await db_database.set_item(store.STORAGE_KEY, json.dumps(seed))
        await self.assertSeeded(await store.load())

    # ---------- Round trip ----------

    async def test_save_then_load_reproduces_store_after_mutations(self):
        state = AppState()
        await state.start()
        await state.login("admin@example.com", "Password123!")

        await crud.register(state, "Ann", "Lee", "a@x.com", "pw1234")
        await crud.verify_email(state, "a@x.com")
        dept = await crud.create_department(state, "Ops", "Operations")
        await crud.create_employee(state, "E-1", "a@x.com", "Clerk", dept.id, "2024-03-01")
        await crud.create_request(state, "Equipment", [("Laptop", 1), ("Mouse", "2")])

        reloaded = await store.load()
        self.assertEqual(reloaded, state.store)

    async def test_existing_document_is_loaded_unchanged(self):
        custom = store.seed_store()
        custom.departments.pop()
        await store.save(custom)
        self.assertEqual(await store.load(), custom)

    # ---------- Token ----------

    async def test_token_helpers(self):
        self.assertIsNone(await store.read_token())
        await store.write_token("admin@example.com")
        self.assertEqual(await store.read_token(), "admin@example.com")
        await store.clear_token()
        self.assertIsNone(await store.read_token())
        # clearing twice is fine
        await store.clear_token()


if __name__ == "__main__":
    unittest.main()
