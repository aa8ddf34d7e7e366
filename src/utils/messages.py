from typing import Literal, Optional

from textual.message import Message

from db.models import SessionUser

CartAction = Literal["add", "update", "remove", "clear", "checkout"]


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit, the app saves state before exiting
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the admin logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when the admin logged in, so screens and the saved session refresh
    """

    bubble = True

    def __init__(self, user: SessionUser) -> None:
        super().__init__()
        self.user = user


class CartChangedMessage(Message):
    """
    Fired after every cart mutation. The app saves state on it, the cart
    screen and sidebar redraw.

    If posted from outside CartScreen, make sure to post at App level
    """

    bubble = True

    def __init__(self, action: CartAction, product_id: Optional[int] = None) -> None:
        super().__init__()
        self.action = action
        self.product_id = product_id


class NewOrderMessage(Message):
    """
    Fired when a new order is created.
    Listened to by the order history and the admin dashboard
    """

    bubble = True

    def __init__(self, order_id: str) -> None:
        super().__init__()
        self.order_id = order_id


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
