"""Admin console: one snapshot of the roster, service requests and content open to moderation."""

from commons.core.store import RecordStore
from commons.schemas.admin import AdminConsole
from commons.schemas.users import UserRecord
from commons.services.access import Action, ensure_allowed
from commons.services.chat import list_messages
from commons.services.feed import list_posts
from commons.services.service_requests import list_all_requests
from commons.services.users import list_users


def load_console(store: RecordStore, viewer: UserRecord | None) -> AdminConsole:
    """Raises AccessDenied for non-admin viewers."""
    ensure_allowed(viewer, Action.VIEW_ADMIN_CONSOLE)
    return AdminConsole(
        users=list_users(store),
        requests=list_all_requests(store),
        posts=list_posts(store),
        chat=list_messages(store),
    )
