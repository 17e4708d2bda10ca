# app/services/friend_service.py

from app.core.exceptions import DuplicateRequestError, NotFoundError, SelfReferenceError
from app.core.logger import logger
from app.models.friendship import FriendStatus
from app.repositories.relationship_store import RelationshipStore


class FriendService:
    """
    Friend request state machine for one pair of users at a time.

        NONE --send(A,B)--> PENDING(A->B)
        PENDING(A->B) --cancel(A,B)--> NONE
        PENDING(A->B) --reject(B,A)--> NONE
        PENDING(A->B) --accept(B,A)--> ACCEPTED
        ACCEPTED --unfriend(A,B) or unfriend(B,A)--> NONE

    ``actor`` is always the logged-in user and ``other`` the user in the URL.
    Every transition is a single conditional call on the store, so when two
    requests race on the same pair one of them wins and the other gets the
    error for the state the winner left behind.
    """

    def __init__(self, store: RelationshipStore):
        self.store = store

    def send_request(self, actor: str, other: str) -> None:
        if actor == other:
            raise SelfReferenceError("cannot send a friend request to yourself")

        if not self.store.insert_if_absent(actor, other):
            raise DuplicateRequestError(
                "a friend request is already pending between these users or they are already friends"
            )
        logger.info(f"Friend request sent: {actor} -> {other}")

    def cancel_request(self, actor: str, other: str) -> None:
        if not self.store.delete_if(actor, other, FriendStatus.PENDING, requester=actor):
            raise NotFoundError(f"no pending friend request from {actor} to {other}")
        logger.info(f"Friend request cancelled: {actor} -> {other}")

    def accept_request(self, actor: str, other: str) -> None:
        accepted = self.store.compare_and_set_status(
            requester=other,
            target=actor,
            expected=FriendStatus.PENDING,
            new=FriendStatus.ACCEPTED,
        )
        if not accepted:
            raise NotFoundError(f"no pending friend request from {other} to {actor}")
        logger.info(f"Friend request accepted: {other} -> {actor}")

    def reject_request(self, actor: str, other: str) -> None:
        if not self.store.delete_if(actor, other, FriendStatus.PENDING, requester=other):
            raise NotFoundError(f"no pending friend request from {other} to {actor}")
        logger.info(f"Friend request rejected: {other} -> {actor}")

    def unfriend(self, actor: str, other: str) -> None:
        if not self.store.delete_if(actor, other, FriendStatus.ACCEPTED):
            raise NotFoundError(f"{actor} and {other} are not friends")
        logger.info(f"Unfriended: {actor} x {other}")
