import os
import sys
import tempfile
import unittest
from datetime import datetime

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud  # noqa: E402
from db import database as db_database  # noqa: E402
from db import store  # noqa: E402
from utils.errors import (  # noqa: E402
    AccessDenial,
    ConflictError,
    ReferentialError,
    ValidationError,
)
from utils.pure import format_items, generate_markdown_table, parse_items  # noqa: E402
from utils.state import AppState  # noqa: E402


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point storage to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False

    async def asyncSetUp(self):
        self.state = AppState()
        await self.state.start()
        await self.state.login("admin@example.com", "Password123!")

    def tearDown(self):
        self.temp_dir.cleanup()

    async def as_user(self, email="u@x.com"):
        await crud.register(self.state, "Uma", "User", email, "pw1234")
        await crud.verify_email(self.state, email)
        await self.state.login(email, "pw1234")

    async def assertUnchanged(self, before):
        self.assertEqual(self.state.store.to_dict(), before)
        self.assertEqual((await store.load()).to_dict(), before)

    # ---------- Accounts ----------

    async def test_register_validation(self):
        before = self.state.store.to_dict()
        cases = [
            ("", "Lee", "a@x.com", "pw1234"),
            ("Ann", "Lee", "not-an-email", "pw1234"),
            ("Ann", "Lee", "a@x.com", "short"),
        ]
        for args in cases:
            with self.subTest(args=args):
                with self.assertRaises(ValidationError):
                    await crud.register(self.state, *args)
        await self.assertUnchanged(before)

    async def test_register_conflict_is_case_insensitive(self):
        await crud.register(self.state, "Ann", "Lee", "Ann@X.com", "pw1234")
        before = self.state.store.to_dict()
        with self.assertRaises(ConflictError):
            await crud.register(self.state, "Ann", "Again", "ann@x.com", "pw1234")
        await self.assertUnchanged(before)

    async def test_verify_unknown_email(self):
        with self.assertRaises(ValidationError):
            await crud.verify_email(self.state, "ghost@x.com")

    async def test_update_profile_and_reset_password(self):
        await self.as_user()
        await crud.update_profile(self.state, " Umi ", "Usr")
        self.assertEqual(self.state.account.full_name, "Umi Usr")

        await crud.reset_password(self.state, "u@x.com", "newpass")
        reloaded = await store.load()
        self.assertEqual(reloaded.find_account("u@x.com").password, "newpass")

        # a plain user cannot reset someone else's password
        with self.assertRaises(AccessDenial):
            await crud.reset_password(self.state, "admin@example.com", "hijack1")

    async def test_update_profile_requires_session(self):
        await self.state.logout()
        with self.assertRaises(AccessDenial):
            await crud.update_profile(self.state, "A", "B")

    async def test_admin_account_management(self):
        acct = await crud.create_account(
            self.state, "Bo", "Boss", "bo@x.com", "pw1234", "admin", True
        )
        self.assertTrue(acct.verified)
        with self.assertRaises(ConflictError):
            await crud.create_account(self.state, "Bo", "Two", "bo@x.com", "pw1234")
        with self.assertRaises(ValidationError):
            await crud.create_account(self.state, "X", "Y", "x@x.com", "pw1234", "root")

        await crud.update_account(self.state, "bo@x.com", "Bob", "Boss", "user", False)
        self.assertEqual(acct.role, "user")
        self.assertFalse(acct.verified)
        self.assertEqual(acct.password, "pw1234")  # blank password keeps the old one

        await crud.update_account(
            self.state, "bo@x.com", "Bob", "Boss", "user", True, "changed1"
        )
        self.assertEqual(acct.password, "changed1")

        await crud.delete_account(self.state, "bo@x.com")
        self.assertIsNone((await store.load()).find_account("bo@x.com"))

    async def test_admin_cannot_delete_self(self):
        before = self.state.store.to_dict()
        with self.assertRaises(ConflictError):
            await crud.delete_account(self.state, "admin@example.com")
        await self.assertUnchanged(before)

    async def test_admin_cannot_demote_or_unverify_self(self):
        notified = []
        self.state.subscribe(notified.append)
        before = self.state.store.to_dict()
        for role, verified in [("user", True), ("admin", False), ("user", False)]:
            with self.subTest(role=role, verified=verified):
                with self.assertRaises(ConflictError):
                    await crud.update_account(
                        self.state, "admin@example.com", "Admin", "User", role, verified
                    )
        await self.assertUnchanged(before)
        self.assertTrue(self.state.is_admin)
        self.assertEqual(notified, [])

    async def test_self_edits_notify_session_listeners(self):
        notified = []
        self.state.subscribe(notified.append)

        await crud.update_account(
            self.state, "admin@example.com", "Ada", "Admin", "admin", True
        )
        self.assertEqual(self.state.display_name, "Ada Admin")
        self.assertEqual(notified, [self.state.account])

        await crud.update_profile(self.state, "Ada", "Root")
        self.assertEqual(len(notified), 2)

        # editing someone else leaves the session alone
        await crud.create_account(self.state, "Bo", "B", "bo@x.com", "pw1234", "user", True)
        await crud.update_account(self.state, "bo@x.com", "Bo", "B", "admin", True)
        self.assertEqual(len(notified), 2)

    async def test_admin_operations_denied_for_users_and_guests(self):
        await self.as_user()
        ops = [
            lambda: crud.create_department(self.state, "Ops"),
            lambda: crud.delete_department(self.state, 1),
            lambda: crud.create_account(self.state, "A", "B", "ab@x.com", "pw1234"),
            lambda: crud.delete_account(self.state, "admin@example.com"),
            lambda: crud.create_employee(
                self.state, "E-9", "u@x.com", "Clerk", 1, "2024-01-01"
            ),
        ]
        for op in ops:
            with self.assertRaises(AccessDenial):
                await op()
        await self.state.logout()
        for op in ops:
            with self.assertRaises(AccessDenial):
                await op()

    # ---------- Departments ----------

    async def test_department_ids_are_max_plus_one(self):
        d3 = await crud.create_department(self.state, "Ops", "Operations")
        self.assertEqual(d3.id, 3)
        await crud.delete_department(self.state, 2)
        d4 = await crud.create_department(self.state, "Legal")
        self.assertEqual(d4.id, 4)
        await crud.delete_department(self.state, 4)
        await crud.delete_department(self.state, 3)
        d2 = await crud.create_department(self.state, "Sales")
        self.assertEqual(d2.id, 2)

        await crud.update_department(self.state, "2", "Sales & Marketing", "")
        self.assertEqual(self.state.store.find_department(2).name, "Sales & Marketing")
        with self.assertRaises(ValidationError):
            await crud.update_department(self.state, 99, "X")
        with self.assertRaises(ValidationError):
            await crud.create_department(self.state, "   ")

    async def test_cannot_delete_department_in_use(self):
        await crud.register(self.state, "Ann", "Lee", "a@x.com", "pw1234")
        await crud.create_employee(self.state, "E-1", "a@x.com", "Dev", 1, "2024-01-02")
        before = self.state.store.to_dict()

        with self.assertRaises(ReferentialError):
            await crud.delete_department(self.state, 1)
        self.assertEqual(len(self.state.store.departments), 2)
        await self.assertUnchanged(before)

        await crud.delete_employee(self.state, "E-1")
        await crud.delete_department(self.state, 1)
        self.assertEqual([d.id for d in self.state.store.departments], [2])

    # ---------- Employees ----------

    async def test_employee_checks(self):
        await crud.register(self.state, "Ann", "Lee", "a@x.com", "pw1234")
        emp = await crud.create_employee(
            self.state, " E-1 ", "A@X.com", "Dev", "1", "2024-01-02"
        )
        self.assertEqual((emp.employee_id, emp.user_email, emp.dept_id), ("E-1", "a@x.com", 1))
        before = self.state.store.to_dict()

        with self.assertRaises(ConflictError):
            await crud.create_employee(self.state, "E-1", "a@x.com", "Dev", 1, "2024-01-02")
        with self.assertRaises(ReferentialError):
            await crud.create_employee(self.state, "E-2", "ghost@x.com", "Dev", 1, "2024-01-02")
        with self.assertRaises(ReferentialError):
            await crud.create_employee(self.state, "E-2", "a@x.com", "Dev", 42, "2024-01-02")
        with self.assertRaises(ValidationError):
            await crud.create_employee(self.state, "E-2", "a@x.com", "Dev", 1, "02/01/2024")
        with self.assertRaises(ValidationError):
            await crud.create_employee(self.state, "E-2", "a@x.com", "", 1, "2024-01-02")
        with self.assertRaises(ValidationError):
            await crud.create_employee(self.state, "E-2", "a@x.com", "Dev", None, "2024-01-02")
        await self.assertUnchanged(before)

        await crud.update_employee(self.state, "E-1", "a@x.com", "Lead", 2, "2024-02-01")
        reloaded = (await store.load()).find_employee("E-1")
        self.assertEqual((reloaded.position, reloaded.dept_id), ("Lead", 2))

        with self.assertRaises(ReferentialError):
            await crud.update_employee(self.state, "E-1", "a@x.com", "Lead", 9, "2024-02-01")
        with self.assertRaises(ValidationError):
            await crud.delete_employee(self.state, "E-404")

    # ---------- Requests ----------

    async def test_requests_are_owned_and_listed_newest_first(self):
        when = datetime(2025, 5, 1, 9, 30)
        admin_req = await crud.create_request(self.state, "Resources", [("Desk", 1)], when)
        self.assertEqual(admin_req.status, "Pending")
        self.assertEqual(admin_req.date, "2025-05-01T09:30:00")

        await self.as_user()
        r1 = await crud.create_request(self.state, "Equipment", parse_items("Pens: 3, Paper x2"))
        r2 = await crud.create_request(self.state, "Office Supplies", [("Stapler", "1")])
        self.assertGreater(r2.id, r1.id)
        self.assertEqual(r1.employee_email, "u@x.com")
        self.assertEqual(format_items(r1.items), "Pens x3, Paper x2")

        self.assertEqual([r.id for r in crud.list_requests(self.state)], [r2.id, r1.id])

        await self.state.login("admin@example.com", "Password123!")
        self.assertEqual(
            [r.id for r in crud.list_requests(self.state)],
            sorted([r1.id, r2.id, admin_req.id], reverse=True),
        )

    async def test_request_validation(self):
        before = self.state.store.to_dict()
        bad = [
            ("", [("Pen", 1)]),
            ("Equipment", []),
            ("Equipment", [("Pen", 0)]),
            ("Equipment", [("Pen", -2)]),
            ("Equipment", [("Pen", "many")]),
            ("Equipment", [("  ", 1)]),
        ]
        for req_type, items in bad:
            with self.subTest(req_type=req_type, items=items):
                with self.assertRaises(ValidationError):
                    await crud.create_request(self.state, req_type, items)
        await self.assertUnchanged(before)

        await self.state.logout()
        with self.assertRaises(AccessDenial):
            await crud.create_request(self.state, "Equipment", [("Pen", 1)])
        with self.assertRaises(AccessDenial):
            crud.list_requests(self.state)


class PureTestCase(unittest.TestCase):
    def test_parse_items(self):
        self.assertEqual(
            parse_items("Pens: 3, Paper x2, Stapler, , Boxes xl x 4"),
            [("Pens", "3"), ("Paper", "2"), ("Stapler", "1"), ("Boxes xl", "4")],
        )
        self.assertEqual(parse_items(""), [])

    def test_parse_items_words_starting_with_x_are_part_of_the_name(self):
        self.assertEqual(
            parse_items("Box xerox paper, Xylophone, Toner xl X3"),
            [("Box xerox paper", "1"), ("Xylophone", "1"), ("Toner xl", "3")],
        )

    def test_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [[1, "x"]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| 1 | x |")
        self.assertEqual(generate_markdown_table(None, []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A"], [[1]], ["l", "r"])


if __name__ == "__main__":
    unittest.main()
