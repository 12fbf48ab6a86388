from typing import Any

from fastapi import APIRouter, Depends, Query

from axotl.api.deps import get_identity, get_notifier
from axotl.api.schemas import envelope
from axotl.components.auth import Identity
from axotl.components.notifications import ListNotificationsInput, NotificationDispatcher

router = APIRouter()


@router.get("")
def list_notifications(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    read: bool | None = Query(default=None),
    identity: Identity = Depends(get_identity),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> dict[str, Any]:
    result = notifier.list_for_user(
        ListNotificationsInput(owner_id=identity.user_id, page=page, limit=limit, read=read)
    )
    return envelope(
        "Notificaciones obtenidas",
        {
            "items": [n.model_dump(mode="json") for n in result.items],
            "pagination": {
                "page": result.pagination.page,
                "limit": result.pagination.limit,
                "total": result.pagination.total,
                "totalPages": result.pagination.total_pages,
            },
            "unread": result.unread,
        },
    )


@router.get("/unread-count")
def unread_count(
    identity: Identity = Depends(get_identity),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> dict[str, Any]:
    return envelope("Notificaciones no leídas", {"unread": notifier.unread_count(identity.user_id)})


@router.put("/read-all")
def mark_all_read(
    identity: Identity = Depends(get_identity),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> dict[str, Any]:
    count = notifier.mark_all_read(identity.user_id)
    return envelope("Notificaciones marcadas como leídas", {"updated": count})


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: int,
    identity: Identity = Depends(get_identity),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> dict[str, Any]:
    notifier.mark_read(notification_id, identity.user_id)
    return envelope("Notificación marcada como leída")


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    identity: Identity = Depends(get_identity),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> dict[str, Any]:
    notifier.delete(notification_id, identity.user_id)
    return envelope("Notificación eliminada")
