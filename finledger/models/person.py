"""People who can carry a share of a transaction."""

from pydantic import Field

from finledger.models.base import LedgerEntity


class Person(LedgerEntity):
    """A contact. Email and phone are free text and not validated."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=50)

    @classmethod
    def create(cls, name: str, email: str = "", phone: str = "") -> "Person":
        return cls(name=name, email=email, phone=phone)

    def update(self, name: str, email: str, phone: str) -> None:
        self.name = name
        self.email = email
        self.phone = phone
        self.touch()
