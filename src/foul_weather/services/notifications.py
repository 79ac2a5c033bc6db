# ABOUTME: Push notification fanout through Firebase Cloud Messaging topics.
# ABOUTME: Announces fresh audio summaries to every subscriber of a WFO topic.

import firebase_admin
import structlog
from firebase_admin import messaging

from foul_weather.config import Settings, get_settings
from foul_weather.models import NotificationEvent

log = structlog.get_logger()


class NotificationService:
    """Publishes NotificationEvents to FCM topics."""

    def __init__(
        self,
        settings: Settings | None = None,
        app: firebase_admin.App | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._app = app

    @property
    def app(self) -> firebase_admin.App:
        """Lazy-initialized Firebase app (application default credentials)."""
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                options = {"projectId": self.settings.gcp_project} if self.settings.gcp_project else None
                self._app = firebase_admin.initialize_app(options=options)
        return self._app

    def build_event(self, wfo_identifier: str) -> NotificationEvent:
        """Create the "summary ready" event for a WFO."""
        return NotificationEvent(
            wfo_identifier=wfo_identifier,
            topic=f"{self.settings.notification_topic_prefix}{wfo_identifier}",
            title=self.settings.notification_title,
            body=self.settings.notification_body,
        )

    def publish(self, event: NotificationEvent) -> str:
        """Send the event to its topic.

        Returns:
            The FCM message id.
        """
        message = messaging.Message(
            notification=messaging.Notification(title=event.title, body=event.body),
            data=event.data,
            topic=event.topic,
        )
        message_id = messaging.send(message, app=self.app)
        log.info("notification_sent", topic=event.topic, message_id=message_id)
        return message_id
