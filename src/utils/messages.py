from textual.message import Message


# both are handled by TiendaApp; screens below the app never see them


class QuitRequestedMessage(Message):
    """Quit confirmed, the session is closed before the app exits."""

    bubble = True


class UserLogoutMessage(Message):
    """Logout confirmed from the sidebar; cart and identity get dropped."""

    bubble = True
