from typing import Protocol


class Mailer(Protocol):
    def send_password_reset(self, to_email: str, reset_link: str) -> None:
        ...
