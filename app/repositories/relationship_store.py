# app/repositories/relationship_store.py

"""
Relationship stores.

A store keeps at most one friendship record per unordered pair of users and
exposes only conditional, single-step mutations. Each mutation either applies
completely or reports ``False``; callers never see a half-written pair.

Two implementations:

* ``SqlRelationshipStore`` - SQLAlchemy, the one the app runs on. The unique
  ``pair_key`` column makes inserts insert-if-absent, and status changes and
  deletes are ``UPDATE``/``DELETE`` statements filtered on the expected state,
  so the database decides which of two racing callers wins.
* ``InMemoryRelationshipStore`` - a dict guarded by per-pair locks, for tests
  and single-process deployments without a database.
"""

from typing import Callable, Dict, Optional, Protocol, TypeVar

from sqlalchemy.exc import DBAPIError, DisconnectionError, IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from app.common.locks import KeyedLocks
from app.core.exceptions import StoreUnavailableError
from app.core.logger import logger
from app.models.friendship import FriendStatus, Friendship, Relationship, pair_key

T = TypeVar("T")


class RelationshipStore(Protocol):

    def get(self, a: str, b: str) -> Optional[Relationship]:
        """Return the record for the pair {a, b} in either direction, if any."""
        ...

    def insert_if_absent(self, requester: str, target: str) -> bool:
        """Create PENDING(requester -> target) unless the pair already has a record."""
        ...

    def compare_and_set_status(
        self, requester: str, target: str, expected: FriendStatus, new: FriendStatus
    ) -> bool:
        """Move requester -> target from ``expected`` to ``new``; False if it is not in ``expected``."""
        ...

    def delete_if(
        self, a: str, b: str, status: FriendStatus, requester: Optional[str] = None
    ) -> bool:
        """
        Delete the pair's record when it has ``status`` (and, if given, was
        sent by ``requester``). False when nothing matched.
        """
        ...


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


class SqlRelationshipStore:

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _run(self, op: Callable[[Session], T]) -> T:
        # one retry on connectivity errors, then give up loudly
        for attempt in (1, 2):
            db = self._session_factory()
            try:
                return op(db)
            except Exception as e:
                db.rollback()
                if not _is_transient(e):
                    raise
                if attempt == 2:
                    logger.error(f"Relationship store unavailable: {e}")
                    raise StoreUnavailableError("relationship store unavailable") from e
                logger.warning(f"Relationship store transient error, retrying: {e}")
            finally:
                db.close()
        raise AssertionError("unreachable")

    @staticmethod
    def _find(db: Session, a: str, b: str) -> Optional[Friendship]:
        return db.query(Friendship).filter(Friendship.pair_key == pair_key(a, b)).first()

    def get(self, a: str, b: str) -> Optional[Relationship]:
        def op(db: Session) -> Optional[Relationship]:
            row = self._find(db, a, b)
            return Relationship.from_row(row) if row else None

        return self._run(op)

    def insert_if_absent(self, requester: str, target: str) -> bool:
        def op(db: Session) -> bool:
            for attempt in (1, 2):
                db.add(Friendship(
                    pair_key=pair_key(requester, target),
                    requester_id=requester,
                    target_id=target,
                    status=FriendStatus.PENDING.value,
                ))
                try:
                    db.commit()
                    return True
                except IntegrityError:
                    db.rollback()
                    # only a pair_key clash means "already exists"
                    if self._find(db, requester, target) is not None:
                        return False
                    # the clashing row may have been deleted since; insert once more
                    if attempt == 2:
                        raise
            raise AssertionError("unreachable")

        return self._run(op)

    def compare_and_set_status(
        self, requester: str, target: str, expected: FriendStatus, new: FriendStatus
    ) -> bool:
        def op(db: Session) -> bool:
            updated = db.query(Friendship).filter(
                Friendship.pair_key == pair_key(requester, target),
                Friendship.requester_id == requester,
                Friendship.target_id == target,
                Friendship.status == expected.value,
            ).update({Friendship.status: new.value}, synchronize_session=False)
            db.commit()
            return updated == 1

        return self._run(op)

    def delete_if(
        self, a: str, b: str, status: FriendStatus, requester: Optional[str] = None
    ) -> bool:
        def op(db: Session) -> bool:
            query = db.query(Friendship).filter(
                Friendship.pair_key == pair_key(a, b),
                Friendship.status == status.value,
            )
            if requester is not None:
                query = query.filter(Friendship.requester_id == requester)
            deleted = query.delete(synchronize_session=False)
            db.commit()
            return deleted == 1

        return self._run(op)


class InMemoryRelationshipStore:

    def __init__(self, stripes: int = 64):
        self._records: Dict[str, Relationship] = {}
        self._locks = KeyedLocks(stripes)

    def get(self, a: str, b: str) -> Optional[Relationship]:
        return self._records.get(pair_key(a, b))

    def insert_if_absent(self, requester: str, target: str) -> bool:
        key = pair_key(requester, target)
        with self._locks.for_key(key):
            if key in self._records:
                return False
            self._records[key] = Relationship(requester, target, FriendStatus.PENDING)
            return True

    def compare_and_set_status(
        self, requester: str, target: str, expected: FriendStatus, new: FriendStatus
    ) -> bool:
        key = pair_key(requester, target)
        with self._locks.for_key(key):
            current = self._records.get(key)
            if current != Relationship(requester, target, expected):
                return False
            self._records[key] = Relationship(requester, target, new)
            return True

    def delete_if(
        self, a: str, b: str, status: FriendStatus, requester: Optional[str] = None
    ) -> bool:
        key = pair_key(a, b)
        with self._locks.for_key(key):
            current = self._records.get(key)
            if current is None or current.status != status:
                return False
            if requester is not None and current.requester != requester:
                return False
            del self._records[key]
            return True

    def clear(self) -> None:
        self._records.clear()
