from django.urls import path

from apps.support.notifications.views import NotificationEnqueueView

urlpatterns = [
    path("", NotificationEnqueueView.as_view(), name="notification-enqueue"),
]
