# resume_gate/expiry.py
# Advisory expiry timers. Lost on restart; download re-checks the stored
# timestamp, and `flask expire-stale` sweeps anything a timer missed.

import logging
import threading

logger = logging.getLogger(__name__)


class ExpiryScheduler:

    def __init__(self, app, enabled: bool = True):
        self.app = app
        self.enabled = enabled

    def schedule(self, request_id: int, delay_seconds: float, check):
        """Run ``check(request_id)`` inside an app context after ``delay_seconds``."""
        if not self.enabled:
            logger.debug("Expiry timer disabled; request %s relies on download-time check", request_id)
            return None

        timer = threading.Timer(delay_seconds, self._run, args=(request_id, check))
        timer.daemon = True
        timer.start()
        return timer

    def _run(self, request_id, check):
        try:
            with self.app.app_context():
                if check(request_id):
                    logger.info("Request %s auto-expired by timer", request_id)
        except Exception:
            logger.exception("auto-expire error for request %s", request_id)
