from enum import Enum
from typing import Literal

from pydantic import Field

from kodilink.protocol.base import Request

GUI_SHOW_NOTIFICATION = "GUI.ShowNotification"

DEFAULT_DISPLAY_TIME_MS = 5000


class NotificationImage(str, Enum):
    """Built-in icons for on-screen notifications."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ShowNotificationRequest(Request):
    """
    Pop up a notification on the player's screen.
    """

    method: Literal["GUI.ShowNotification"] = GUI_SHOW_NOTIFICATION
    title: str
    message: str
    image: NotificationImage | str = NotificationImage.INFO
    """
    One of the built-in icons, or a path/URL to an image.
    """

    display_time: int = Field(default=DEFAULT_DISPLAY_TIME_MS, alias="displaytime")
    """
    How long the notification stays up, in milliseconds.
    """
