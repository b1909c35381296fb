from functools import wraps

from django.conf import settings
from django.shortcuts import redirect
from django.urls import reverse

from .backend import SESSION_ACCESS_TOKEN_KEY, SESSION_EMAIL_KEY


def is_admin_email(email):
    allowed = settings.DASHBOARD_ADMIN_EMAILS
    return bool(email) and (not allowed or email.lower() in allowed)


def admin_required(view_func):
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        # Signed-in state lives in the Django session, see backend.remember_session
        if not request.session.get(SESSION_ACCESS_TOKEN_KEY):
            return redirect(f"{reverse('dashboard:login')}?next={request.path}")
        if not is_admin_email(request.session.get(SESSION_EMAIL_KEY)):
            return redirect('dashboard:unauthorized')
        return view_func(request, *args, **kwargs)
    return _wrapped_view
