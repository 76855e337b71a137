# load/save of the single store document and the auth token
import json
from typing import Optional

from db import database
from db.models import Account, Department, Store
from utils.errors import StorageCorruption
from utils.logger import get_logger

_logger = get_logger(__name__)

STORAGE_KEY = "ipt_demo_v1"
TOKEN_KEY = "auth_token"


def seed_store() -> Store:
    """Fresh default store: one admin, two departments, nothing else."""
    return Store(
        accounts=[
            Account(
                first_name="Admin",
                last_name="User",
                email="admin@example.com",
                password="Password123!",
                role="admin",
                verified=True,
            )
        ],
        departments=[
            Department(1, "Engineering", "Software team"),
            Department(2, "HR", "Human Resources"),
        ],
    )


async def load() -> Store:
    """
    Read the store document. Absent or corrupt documents are replaced by the seed,
    which is persisted immediately.
    """
    raw = await database.get_item(STORAGE_KEY)
    if raw is not None:
        try:
            return Store.from_dict(json.loads(raw))
        except (json.JSONDecodeError, StorageCorruption) as e:
            _logger.warning(f"Stored document is corrupt ({e}), replacing with seed.")
    else:
        _logger.info("No stored document found, seeding defaults.")

    store = seed_store()
    await save(store)
    return store


async def save(store: Store) -> None:
    await database.set_item(STORAGE_KEY, json.dumps(store.to_dict()))
    _logger.debug(
        f"Store saved: {len(store.accounts)} accounts, "
        f"{len(store.departments)} departments, {len(store.employees)} employees, "
        f"{len(store.requests)} requests."
    )


async def read_token() -> Optional[str]:
    return await database.get_item(TOKEN_KEY)


async def write_token(email: str) -> None:
    await database.set_item(TOKEN_KEY, email)


async def clear_token() -> None:
    await database.remove_item(TOKEN_KEY)
