import logging
import time

from plyer import notification

_last_alert = 0


def alert(message, title="Screen Mirror", cooldown=5):
    global _last_alert
    now = time.time()

    if now - _last_alert < cooldown:
        return False

    _last_alert = now

    try:
        notification.notify(
            title=title,
            message=message,
            app_name="Screen Mirror",
            timeout=3
        )
    except Exception:
        logging.error("Notification backend failure", exc_info=True)
        return False
    return True
