"""
Streak state stores
Each store runs a read-compute-write for one user as a single isolated unit:
concurrent calls for the same user apply in commit order, different users
never wait on each other.
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure, PyMongoError

from codenest.errors import StreakNotFoundError, StreakPermissionError, TransactionError
from codenest.logger import get_logger
from codenest.streaks.models import UserStreakState

logger = get_logger(__name__)

# Mutation callback: stored state (None for new users) -> (state to write or None, value to return).
# It may run more than once when the backend retries a conflicting transaction.
Mutation = Callable[[Optional[UserStreakState]], Tuple[Optional[UserStreakState], Any]]

# MongoDB server error codes
UNAUTHORIZED = 13
NAMESPACE_NOT_FOUND = 26


class StreakStore:
    async def transact(self, user_id: str, mutate: Mutation) -> Any:
        raise NotImplementedError

    async def get(self, user_id: str) -> Optional[UserStreakState]:
        raise NotImplementedError


class InMemoryStreakStore(StreakStore):
    """Process-local store; a user's lock lives only while someone holds or awaits it"""

    def __init__(self):
        self._docs: Dict[str, dict] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    async def transact(self, user_id: str, mutate: Mutation) -> Any:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._waiters[user_id] = self._waiters.get(user_id, 0) + 1
        try:
            async with lock:
                current = UserStreakState.from_document(self._docs.get(user_id))
                # Yield so that contending callers really queue on the lock
                await asyncio.sleep(0)
                new_state, value = mutate(current)
                if new_state is not None:
                    self._docs[user_id] = new_state.to_document(user_id)
                return value
        finally:
            self._waiters[user_id] -= 1
            if not self._waiters[user_id]:
                del self._waiters[user_id]
                del self._locks[user_id]

    async def get(self, user_id: str) -> Optional[UserStreakState]:
        return UserStreakState.from_document(self._docs.get(user_id))


class MongoStreakStore(StreakStore):
    """
    MongoDB-backed store.

    The read and the write share one multi-document transaction; a concurrent
    writer on the same user document triggers a write conflict, which
    with_transaction retries from the read.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection: str = "user_streaks"):
        self._db = db
        self._collection = db[collection]

    async def transact(self, user_id: str, mutate: Mutation) -> Any:
        async def callback(session):
            doc = await self._collection.find_one({"user_id": user_id}, session=session)
            new_state, value = mutate(UserStreakState.from_document(doc))
            if new_state is not None:
                await self._collection.replace_one(
                    {"user_id": user_id},
                    new_state.to_document(user_id),
                    upsert=True,
                    session=session,
                )
            return value

        try:
            async with await self._db.client.start_session() as session:
                return await session.with_transaction(callback)
        except PyMongoError as e:
            raise self._translate(e, user_id) from e

    async def get(self, user_id: str) -> Optional[UserStreakState]:
        try:
            doc = await self._collection.find_one({"user_id": user_id})
        except PyMongoError as e:
            raise self._translate(e, user_id) from e
        return UserStreakState.from_document(doc)

    async def create_indexes(self) -> None:
        await self._collection.create_index("user_id", unique=True)

    @staticmethod
    def _translate(error: PyMongoError, user_id: str) -> TransactionError:
        logger.error("Streak transaction failed for user %s: %s", user_id, error)
        if isinstance(error, OperationFailure):
            if error.code == UNAUTHORIZED:
                return StreakPermissionError("Access denied to user data")
            if error.code == NAMESPACE_NOT_FOUND:
                return StreakNotFoundError("User not found")
        return TransactionError(f"Failed to update streak: {error}")
