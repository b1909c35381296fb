# dashboard/relay.py
from __future__ import annotations

import logging

import requests
from django.conf import settings

from .errors import RelayError

logger = logging.getLogger(__name__)

UA = "CampusAdmin/1.0 (scholarship relay)"

SESSION = requests.Session()
SESSION.headers.update({"User-Agent": UA})


def send_scholarship_link(link: str | None) -> bool:
    """POST a scholarship link to the automation webhook.

    Returns ``False`` without sending anything when the link is blank or no
    webhook is configured, ``True`` once the webhook answered with 2xx.
    """
    link = (link or "").strip()
    url = (settings.SCHOLARSHIP_WEBHOOK_URL or "").strip()
    if not link or not url:
        return False

    try:
        r = SESSION.post(url, json={"scholarship_link": link}, timeout=settings.SCHOLARSHIP_WEBHOOK_TIMEOUT)
    except requests.RequestException as exc:
        logger.warning("Scholarship webhook unreachable: %s", exc)
        raise RelayError(f"Webhook request failed: {exc}") from exc

    if not r.ok:
        reason = r.reason or str(r.status_code)
        logger.warning("Scholarship webhook returned %s %s", r.status_code, reason)
        raise RelayError(f"Webhook request failed: {reason}")

    logger.info("Sent scholarship link %s to webhook", link)
    return True


__all__ = ["SESSION", "send_scholarship_link"]
