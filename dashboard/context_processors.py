from .backend import SESSION_EMAIL_KEY
from .pages import PAGES


def navigation(request):
    """Navigation bar entries and the signed-in admin's email."""
    session = getattr(request, "session", None)
    return {
        "nav_pages": list(PAGES.values()),
        "admin_email": session.get(SESSION_EMAIL_KEY, "") if session is not None else "",
    }
