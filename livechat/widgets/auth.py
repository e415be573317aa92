"""Sign-in form and the signed-in user bar."""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import Button, Input, Static

from livechat.models import User


class LoginForm(Vertical):
    """Email/password form that toggles between sign-in and registration."""

    register_mode = reactive(False)

    class Submitted(Message):
        """Posted when the user submits credentials."""

        def __init__(self, email: str, password: str, register: bool) -> None:
            self.email = email
            self.password = password
            self.register = register
            super().__init__()

    def __init__(self, email: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._initial_email = email

    def compose(self) -> ComposeResult:
        yield Static("livechat", classes="login-banner")
        yield Static("Sign in with email", id="login-title")
        yield Input(value=self._initial_email, placeholder="Email", id="email")
        yield Input(placeholder="Password", password=True, id="password")
        yield Button("Sign in", id="login-submit", variant="primary")
        with Horizontal(classes="login-switch"):
            yield Static("No account?", id="login-hint")
            yield Button("Register", id="login-toggle")

    def watch_register_mode(self, register: bool) -> None:
        if not self.is_mounted:
            return
        self.query_one("#login-title", Static).update(
            "Create an account" if register else "Sign in with email"
        )
        self.query_one("#login-submit", Button).label = (
            "Register" if register else "Sign in"
        )
        self.query_one("#login-hint", Static).update(
            "Already have an account?" if register else "No account?"
        )
        self.query_one("#login-toggle", Button).label = (
            "Sign in" if register else "Register"
        )

    def focus_first(self) -> None:
        """Focus email, or password when email is already filled in."""
        email = self.query_one("#email", Input)
        if email.value:
            self.query_one("#password", Input).focus()
        else:
            email.focus()

    def clear_password(self) -> None:
        self.query_one("#password", Input).value = ""

    def _submit(self) -> None:
        email = self.query_one("#email", Input).value.strip()
        password = self.query_one("#password", Input).value
        if not email or not password:
            self.app.notify("Email and password are required", severity="warning")
            return
        self.post_message(self.Submitted(email, password, self.register_mode))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id == "login-submit":
            self._submit()
        elif event.button.id == "login-toggle":
            self.register_mode = not self.register_mode

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "email":
            self.query_one("#password", Input).focus()
        else:
            self._submit()


class UserBar(Horizontal):
    """Current user's name with a sign-out button."""

    class SignOutRequested(Message):
        pass

    def compose(self) -> ComposeResult:
        yield Static("", id="user-label")
        yield Button("Sign out", id="sign-out")

    def set_user(self, user: User | None) -> None:
        self.query_one("#user-label", Static).update(user.label if user else "")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "sign-out":
            event.stop()
            self.post_message(self.SignOutRequested())
