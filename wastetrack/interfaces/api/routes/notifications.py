"""Endpoints and websocket handler for the notification engine."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from wastetrack.application.notification_manager import NotificationManager
from wastetrack.domain.entities import PermissionState
from wastetrack.infrastructure.notifications import (
    ClientConnectionManager,
    ClientPermissionPlatform,
    serialize_inbox_notification,
)
from wastetrack.infrastructure.repositories import NotificationInboxRepository
from wastetrack.interfaces.api.dependencies import (
    get_connection_manager,
    get_db,
    get_notification_manager,
    get_permission_platform,
)
from wastetrack.interfaces.api.schemas import (
    AchievementNotificationRequest,
    DeliveryResult,
    EngagementResultRead,
    InboxNotificationRead,
    LevelUpNotificationRequest,
    NotificationConfigSchema,
    NotificationMarkReadRequest,
    NotificationPreferencesSchema,
    PermissionRequestResult,
    PermissionStateRead,
    ScheduledNotificationCreate,
    ScheduledNotificationRead,
    StreakNotificationRequest,
    TickResultRead,
    WeeklyReportNotificationRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/permission", response_model=PermissionStateRead)
def read_permission(
    manager: NotificationManager = Depends(get_notification_manager),
) -> PermissionStateRead:
    """Return the permission state mirrored from the client."""

    return PermissionStateRead(state=manager.gate.state)


@router.put("/permission", response_model=PermissionStateRead)
def report_permission(
    payload: PermissionStateRead,
    platform: ClientPermissionPlatform = Depends(get_permission_platform),
) -> PermissionStateRead:
    """Record the permission state reported by the client."""

    platform.report(payload.state)
    return PermissionStateRead(state=platform.current_state())


@router.post("/permission/request", response_model=PermissionRequestResult)
async def request_permission(
    manager: NotificationManager = Depends(get_notification_manager),
) -> PermissionRequestResult:
    """Ask the client for permission unless it was already granted or denied."""

    return PermissionRequestResult(granted=await manager.request_permission())


@router.post("/show", response_model=DeliveryResult)
async def show_notification(
    payload: NotificationConfigSchema,
    manager: NotificationManager = Depends(get_notification_manager),
) -> DeliveryResult:
    """Deliver a notification right away."""

    try:
        config = payload.to_entity()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DeliveryResult(delivered=await manager.show_notification(config))


@router.post("/achievement", response_model=DeliveryResult)
async def show_achievement_notification(
    payload: AchievementNotificationRequest,
    manager: NotificationManager = Depends(get_notification_manager),
) -> DeliveryResult:
    """Announce an achievement unlocked on the client."""

    delivered = await manager.show_achievement_notification(
        payload.id,
        payload.title,
        payload.description,
        category=payload.type,
        credits=payload.credits,
        level=payload.level,
        streak=payload.streak,
    )
    return DeliveryResult(delivered=delivered)


@router.post("/streak", response_model=DeliveryResult)
async def show_streak_notification(
    payload: StreakNotificationRequest,
    manager: NotificationManager = Depends(get_notification_manager),
) -> DeliveryResult:
    delivered = await manager.show_streak_notification(payload.streak, payload.message)
    return DeliveryResult(delivered=delivered)


@router.post("/level-up", response_model=DeliveryResult)
async def show_level_up_notification(
    payload: LevelUpNotificationRequest,
    manager: NotificationManager = Depends(get_notification_manager),
) -> DeliveryResult:
    delivered = await manager.show_level_up_notification(payload.level, payload.level_name)
    return DeliveryResult(delivered=delivered)


@router.post("/weekly-report", response_model=DeliveryResult)
async def show_weekly_report_notification(
    payload: WeeklyReportNotificationRequest,
    manager: NotificationManager = Depends(get_notification_manager),
) -> DeliveryResult:
    """Send the weekly impact summary."""

    delivered = await manager.show_weekly_report_notification(
        payload.weekly_credits, payload.trees_saved, payload.co2_saved
    )
    return DeliveryResult(delivered=delivered)


@router.get("/scheduled", response_model=list[ScheduledNotificationRead])
def list_scheduled_notifications(
    manager: NotificationManager = Depends(get_notification_manager),
) -> list[ScheduledNotificationRead]:
    """Return the scheduled notifications ordered by their next fire time."""

    return [
        ScheduledNotificationRead.from_entity(entry)
        for entry in manager.scheduled_notifications()
    ]


@router.put("/scheduled", response_model=ScheduledNotificationRead)
def schedule_notification(
    payload: ScheduledNotificationCreate,
    manager: NotificationManager = Depends(get_notification_manager),
) -> ScheduledNotificationRead:
    """Create or replace the scheduled notification with the same id."""

    try:
        entry = payload.to_entity()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    manager.schedule_notification(entry)
    return ScheduledNotificationRead.from_entity(entry)


@router.delete("/scheduled/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_scheduled_notification(
    notification_id: str,
    manager: NotificationManager = Depends(get_notification_manager),
) -> Response:
    """Cancel a single scheduled notification."""

    if not manager.cancel_notification(notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scheduled notification '{notification_id}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/scheduled", status_code=status.HTTP_204_NO_CONTENT)
def cancel_all_scheduled_notifications(
    manager: NotificationManager = Depends(get_notification_manager),
) -> Response:
    """Cancel every scheduled notification, default reminders included."""

    manager.cancel_all_notifications()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/engagement", response_model=EngagementResultRead)
async def evaluate_engagement(
    manager: NotificationManager = Depends(get_notification_manager),
) -> EngagementResultRead:
    """Send milestone and streak notifications after a diary write."""

    delivered = await manager.schedule_engagement_notifications()
    return EngagementResultRead(delivered=[config.id for config in delivered])


@router.post("/tick", response_model=TickResultRead)
async def run_tick(
    manager: NotificationManager = Depends(get_notification_manager),
) -> TickResultRead:
    """Run one scheduler evaluation pass immediately."""

    return TickResultRead(shown=await manager.tick())


@router.get("/preferences", response_model=NotificationPreferencesSchema)
def read_preferences(
    manager: NotificationManager = Depends(get_notification_manager),
) -> NotificationPreferencesSchema:
    """Return the stored notification preferences."""

    return NotificationPreferencesSchema.from_entity(manager.get_preferences())


@router.put("/preferences", response_model=NotificationPreferencesSchema)
def update_preferences(
    payload: NotificationPreferencesSchema,
    manager: NotificationManager = Depends(get_notification_manager),
) -> NotificationPreferencesSchema:
    """Replace the notification preferences."""

    manager.update_preferences(payload.to_entity())
    return NotificationPreferencesSchema.from_entity(manager.get_preferences())


@router.get("/inbox", response_model=list[InboxNotificationRead])
def list_inbox(
    unread_only: bool = False,
    db: Session = Depends(get_db),
) -> list[InboxNotificationRead]:
    """Return the most recent inbox notifications."""

    repository = NotificationInboxRepository(db)
    notifications = repository.list_unread() if unread_only else repository.list_recent()
    return [InboxNotificationRead.from_entity(notification) for notification in notifications]


@router.post("/inbox/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_inbox_as_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    connections: ClientConnectionManager = Depends(get_connection_manager),
) -> Response:
    """Mark the given inbox notifications as read and tell the open clients."""

    ids = payload.unique_ids()
    if NotificationInboxRepository(db).mark_as_read(ids) and connections.has_connections():
        connections.publish({"type": "read", "ids": ids})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint streaming notifications and permission prompts to the client."""

    state = websocket.app.state
    connections = state.connection_manager
    platform: ClientPermissionPlatform = state.permission_platform

    session = state.session_factory()
    try:
        pending_notifications = NotificationInboxRepository(session).list_unread()
    finally:
        session.close()

    await connections.connect(websocket)
    try:
        if pending_notifications:
            await websocket.send_json(
                {
                    "type": "init",
                    "data": [serialize_inbox_notification(n) for n in pending_notifications],
                }
            )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "permission":
                try:
                    platform.report(PermissionState(message.get("state")))
                except ValueError:
                    logger.warning("Ignoring unknown permission state %r", message.get("state"))
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    ack_session = state.session_factory()
                    try:
                        NotificationInboxRepository(ack_session).mark_as_read(
                            [item for item in ids if isinstance(item, int)]
                        )
                    finally:
                        ack_session.close()
                continue
    except WebSocketDisconnect:
        connections.disconnect(websocket)
    except Exception:
        connections.disconnect(websocket)
        raise
