# ============================================================================
# salon_booking/api/v1/scheduling/conversations.py
# Per-chat flags for the conversational booking layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, status
from uuid import UUID

from salon_booking.api.dependencies import get_session_store, get_tenant_id
from salon_booking.schemas.scheduling import ConversationFlagRequest, ConversationFlagsResponse
from salon_booking.services.conversation.session_store import ConversationSessionStore

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("/{chat_id}/flags", response_model=ConversationFlagsResponse)
def get_flags(
        chat_id: str = Path(..., max_length=200),
        tenant_id: UUID = Depends(get_tenant_id),
        store: ConversationSessionStore = Depends(get_session_store)
):
    """Flags currently set for a chat; empty once the session has expired."""
    return {"chat_id": chat_id, "flags": store.get_flags(tenant_id, chat_id)}


@router.put("/{chat_id}/flags/{name}", response_model=ConversationFlagsResponse)
def set_flag(
        body: ConversationFlagRequest,
        chat_id: str = Path(..., max_length=200),
        name: str = Path(..., max_length=100),
        tenant_id: UUID = Depends(get_tenant_id),
        store: ConversationSessionStore = Depends(get_session_store)
):
    """Set one flag and refresh the session expiry."""
    store.set_flag(tenant_id, chat_id, name, body.value)
    return {"chat_id": chat_id, "flags": store.get_flags(tenant_id, chat_id)}


@router.delete("/{chat_id}/flags/{name}", response_model=ConversationFlagsResponse)
def clear_flag(
        chat_id: str = Path(..., max_length=200),
        name: str = Path(..., max_length=100),
        tenant_id: UUID = Depends(get_tenant_id),
        store: ConversationSessionStore = Depends(get_session_store)
):
    store.clear_flag(tenant_id, chat_id, name)
    return {"chat_id": chat_id, "flags": store.get_flags(tenant_id, chat_id)}


@router.delete("/{chat_id}/flags", status_code=status.HTTP_204_NO_CONTENT)
def clear_flags(
        chat_id: str = Path(..., max_length=200),
        tenant_id: UUID = Depends(get_tenant_id),
        store: ConversationSessionStore = Depends(get_session_store)
):
    """Drop the whole session, e.g. once the booking is made."""
    store.clear(tenant_id, chat_id)
