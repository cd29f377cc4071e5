from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to log out from the sidebar
    """

    bubble = True


class SessionInvalidatedMessage(Message):
    """
    Posted by the app when the gateway could not refresh the access token.
    Credentials are already gone; the app shows the login screen again.
    """

    bubble = True


class NavigateMessage(Message):
    """
    Ask the app to show a route, e.g. "/admin/orders".
    The app runs it through the route guard first.
    """

    bubble = True

    def __init__(self, route: str) -> None:
        super().__init__()
        self.route = route
