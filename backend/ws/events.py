import logging
import socketio
from pydantic import TypeAdapter, ValidationError
from database import AsyncSessionLocal
from models import Message
from schemas.message import SendMessagePayload, ReceiveMessagePayload
from ws.presence import PresenceRegistry

logger = logging.getLogger(__name__)

_user_id = TypeAdapter(int)


class ChatNamespace(socketio.AsyncNamespace):
    """Direct messages: persist every message, push it live when the receiver is online."""

    def __init__(self, registry: PresenceRegistry, session_factory=AsyncSessionLocal, namespace: str = "/"):
        super().__init__(namespace)
        self.registry = registry
        self.session_factory = session_factory

    async def on_connect(self, sid: str, environ, auth=None):
        logger.info(f"Socket connected: {sid}")

    async def on_addUser(self, sid: str, user_id):
        try:
            user_id = _user_id.validate_python(user_id)
        except ValidationError:
            logger.warning(f"addUser with invalid user id {user_id!r} from {sid}")
            await self.emit("error", {"message": "Invalid user id"}, to=sid)
            return
        self.registry.add(user_id, sid)
        logger.info(f"User {user_id} is online on {sid}")

    async def on_sendMessage(self, sid: str, data):
        try:
            payload = SendMessagePayload.model_validate(data)
        except ValidationError as e:
            logger.warning(f"sendMessage rejected from {sid}: {e.error_count()} validation error(s)")
            await self.emit("error", {"message": "Invalid message payload"}, to=sid)
            return

        try:
            async with self.session_factory() as db:
                db.add(Message(
                    sender_id=payload.sender_id,
                    receiver_id=payload.receiver_id,
                    message_text=payload.text,
                ))
                await db.commit()
        except Exception:
            logger.error(f"Failed to store message {payload.sender_id} -> {payload.receiver_id}", exc_info=True)
            await self.emit("error", {"message": "Message could not be sent"}, to=sid)
            return

        receiver_sid = self.registry.lookup(payload.receiver_id)
        if receiver_sid:
            out = ReceiveMessagePayload(sender_id=payload.sender_id, message_text=payload.text)
            await self.emit("receiveMessage", out.model_dump(), to=receiver_sid)

    async def on_disconnect(self, sid: str, reason=None):
        user_id = self.registry.remove_sid(sid)
        if user_id is not None:
            logger.info(f"User {user_id} went offline ({sid})")
        logger.info(f"Socket disconnected: {sid}")


def create_sio(registry: PresenceRegistry, cors_allowed_origins="*") -> socketio.AsyncServer:
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_allowed_origins,
        logger=False,
        engineio_logger=False,
    )
    sio.register_namespace(ChatNamespace(registry))
    return sio
