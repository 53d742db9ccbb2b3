from pathlib import Path

from fastapi.templating import Jinja2Templates

from aquadash.auth import ADMIN, ROLE_KEY, USER_KEY
from aquadash.config import badge_css, display_for, statuses_for
from aquadash.services.notifications import SessionFlash
from aquadash.services.request_workflow import available_quantity, needed_quantity
from aquadash.settings import settings
from aquadash.utils.dates import format_date, format_datetime, format_price, format_role, format_time

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

templates.env.globals["app_title"] = settings.APP_TITLE
templates.env.globals["display_for"] = display_for
templates.env.globals["badge_css"] = badge_css
templates.env.globals["statuses_for"] = statuses_for
templates.env.globals["needed_quantity"] = needed_quantity
templates.env.globals["available_quantity"] = available_quantity
templates.env.filters["date"] = format_date
templates.env.filters["datetime"] = format_datetime
templates.env.filters["time"] = format_time
templates.env.filters["price"] = format_price
templates.env.filters["role"] = format_role


def render(request, name: str, context: dict | None = None, status_code: int = 200):
    """
    TemplateResponse with what every page shows: the logged-in user,
    pending toasts and the live activity feed.
    """
    session = request.session
    hub = getattr(request.app.state, "hub", None)
    base = {
        "current_user": session.get(USER_KEY),
        "role": session.get(ROLE_KEY),
        "is_admin": session.get(ROLE_KEY) == ADMIN,
        "flashes": SessionFlash(session).pop_all(),
        "activity": hub.activity.recent(8) if hub else [],
    }
    base.update(context or {})
    return templates.TemplateResponse(request, name, base, status_code=status_code)
