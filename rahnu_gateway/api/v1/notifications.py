"""In-app notifications"""

from typing import List

from fastapi import APIRouter, Depends

from rahnu_gateway.api.dependencies import get_services
from rahnu_gateway.api.v1.schemas import NotificationCreate, NotificationResponse
from rahnu_gateway.services.container import Services

router = APIRouter()


@router.get("/users/{user_id}/notifications", response_model=List[NotificationResponse])
def list_notifications(user_id: int, services: Services = Depends(get_services)):
    return services.notifications.list_for_user(user_id)


@router.get("/users/{user_id}/notifications/unread", response_model=List[NotificationResponse])
def list_unread_notifications(user_id: int, services: Services = Depends(get_services)):
    return services.notifications.list_unread_for_user(user_id)


@router.post("/notifications", response_model=NotificationResponse, status_code=201)
def create_notification(body: NotificationCreate, services: Services = Depends(get_services)):
    return services.notifications.create_notification(body.model_dump())


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(notification_id: int, services: Services = Depends(get_services)):
    return services.notifications.mark_read(notification_id)
