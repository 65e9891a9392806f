"""
Chat Routes

GET /chats/{peer_id}/messages - Thread history, oldest first
POST /chats/{peer_id}/messages - Send a message
WS /chats/{peer_id}/ws?token=... - Live thread: a snapshot on open and on every new message
"""

import logging

import anyio
import pydantic
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from campconnect.core.auth import get_current_profile, resolve_token
from campconnect.core.errors import CampConnectError, ValidationError
from campconnect.schemas.schemas import MessageCreate, ChatMessage, ThreadSnapshot
from campconnect.services.chat_service import ChatService, MessageSubscription, thread_id
from campconnect.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chats", tags=["Chat"])


@router.get("/{peer_id}/messages", response_model=ThreadSnapshot)
async def get_messages(peer_id: str, profile: dict = Depends(get_current_profile)):
    messages = ChatService().history(profile["id"], peer_id)
    return ThreadSnapshot(
        thread_id=thread_id(profile["id"], peer_id),
        messages=messages,
        latest_message_id=messages[-1].id if messages else None,
    )


@router.post("/{peer_id}/messages", response_model=ChatMessage, status_code=201)
async def send_message(peer_id: str, data: MessageCreate, profile: dict = Depends(get_current_profile)):
    return ChatService().send(profile, peer_id, data.message)


def _socket_profile(token: str):
    try:
        user = resolve_token(token)
        return ProfileService().get(user["user_id"]) if user else None
    except CampConnectError as e:
        logger.warning(f"Chat socket rejected: {e.message}")
        return None


def _invalid_frame() -> ValidationError:
    return ValidationError("Invalid message", 'Send messages as {"message": "..."}', field="message")


async def _pump(websocket: WebSocket, subscription: MessageSubscription, scope: anyio.CancelScope):
    try:
        async for snapshot in subscription:
            await websocket.send_json(snapshot.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.debug(f"Chat socket for {subscription.thread_id} went away mid-send")
    finally:
        scope.cancel()


async def _listen(websocket: WebSocket, service: ChatService, profile: dict, peer_id: str, scope: anyio.CancelScope):
    """Send each incoming frame. A rejected frame gets an error frame back and the socket stays open."""
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                return
            try:
                data = MessageCreate.model_validate_json(frame.get("text") or frame.get("bytes") or "")
            except pydantic.ValidationError:
                await websocket.send_json({"error": _invalid_frame().to_dict()})
                continue
            try:
                service.send(profile, peer_id, data.message)
            except CampConnectError as e:
                await websocket.send_json({"error": e.to_dict()})
    finally:
        scope.cancel()


@router.websocket("/{peer_id}/ws")
async def chat_socket(websocket: WebSocket, peer_id: str, token: str = Query("")):
    """
    Live thread for the socket's lifetime.

    The subscription belongs to this socket alone and is cancelled when it
    closes, whichever side closes it.
    """
    profile = _socket_profile(token)
    if profile is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    service = ChatService()
    try:
        subscription = service.subscribe(profile["id"], peer_id)
    except CampConnectError as e:
        await websocket.send_json({"error": e.to_dict()})
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    try:
        async with anyio.create_task_group() as tg:
            tg.start_soon(_pump, websocket, subscription, tg.cancel_scope)
            tg.start_soon(_listen, websocket, service, profile, peer_id, tg.cancel_scope)
    except Exception as e:
        logger.error(f"Chat socket for {subscription.thread_id} failed: {e}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    finally:
        subscription.cancel()
