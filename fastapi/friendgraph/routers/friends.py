from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from friendgraph.core.config import get_settings
from friendgraph.core.errors import operation_errors
from friendgraph.database.connection import mongo_db_dependency
from friendgraph.repositories.friend_repository import FriendRepository
from friendgraph.repositories.user_repository import UserRepository
from friendgraph.schemas.friend import (
    FriendList,
    FriendRecommendation,
    FriendRequestAction,
    FriendRequestList,
    FriendRequestSent,
    MessageResponse,
)
from friendgraph.services.friend_service import FriendService
from friendgraph.utils.dependencies import get_current_user

router = APIRouter(prefix="/friends", tags=["friend"])

def get_friend_service(db = Depends(mongo_db_dependency)):
    friend_repo = FriendRepository(db)
    user_repo = UserRepository(db)
    return FriendService(friend_repo, user_repo)

@router.post("/request/{user_id}", response_model=FriendRequestSent)
async def send_friend_request(user_id: str, current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    with operation_errors("Error sending friend request"):
        request_id = await service.send_friend_request(current_user["_id"], user_id)
    return FriendRequestSent(message="Friend request sent successfully", request_id=request_id)

@router.put("/request/{request_id}", response_model=MessageResponse)
async def respond_to_friend_request(request_id: str, body: FriendRequestAction, current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    with operation_errors("Error processing friend request"):
        status = await service.respond_to_request(current_user["_id"], request_id, body.status)
    return MessageResponse(message=f"Friend request {status}")

@router.get("/recommendations", response_model=List[FriendRecommendation])
async def friend_recommendations(limit: Optional[int] = Query(None, ge=1), current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    settings = get_settings()
    limit = min(limit or settings.recommendation_limit, settings.recommendation_max_limit)
    with operation_errors("Error getting recommendations"):
        return await service.get_recommendations(current_user["_id"], limit)

@router.delete("/unfriend/{user_id}", response_model=MessageResponse)
async def unfriend(user_id: str, current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    with operation_errors("Error unfriending user"):
        await service.unfriend(current_user["_id"], user_id)
    return MessageResponse(message="Friend removed successfully")

@router.get("/list", response_model=FriendList)
async def friend_list(current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    with operation_errors("Error getting friends"):
        friends = await service.get_friend_list(current_user["_id"])
    return {"friends": friends}

@router.get("/requests", response_model=FriendRequestList)
async def received_friend_requests(current_user: dict = Depends(get_current_user), service: FriendService = Depends(get_friend_service)):
    with operation_errors("Error getting friend requests"):
        requests = await service.get_received_requests(current_user["_id"])
    return {"requests": requests}
