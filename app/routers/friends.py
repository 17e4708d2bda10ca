# app/routers/friends.py

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.common.deps import get_current_user_id, get_friend_service, get_user_service
from app.core.exceptions import DuplicateRequestError, NotFoundError, SelfReferenceError
from app.services.friend_service import FriendService
from app.services.user_service import UserService

# every route here needs a logged-in user
router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.post("/friend-requests/to/{target_id}", status_code=status.HTTP_201_CREATED)
def send_friend_request(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    friends: FriendService = Depends(get_friend_service),
    users: UserService = Depends(get_user_service),
):
    if target_id != user_id and users.get_user(target_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        friends.send_request(user_id, target_id)
    except SelfReferenceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DuplicateRequestError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {"message": f"Friend request sent to {target_id}"}


@router.delete("/friend-requests/to/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_friend_request(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    friends: FriendService = Depends(get_friend_service),
):
    try:
        friends.cancel_request(user_id, target_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/friend-requests/from/{target_id}/acceptance")
def accept_friend_request(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    friends: FriendService = Depends(get_friend_service),
):
    try:
        friends.accept_request(user_id, target_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"message": f"You and {target_id} are now friends"}


@router.delete("/friend-requests/from/{target_id}/rejection", status_code=status.HTTP_204_NO_CONTENT)
def reject_friend_request(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    friends: FriendService = Depends(get_friend_service),
):
    try:
        friends.reject_request(user_id, target_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
def unfriend(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    friends: FriendService = Depends(get_friend_service),
):
    try:
        friends.unfriend(user_id, target_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
