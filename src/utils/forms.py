"""
Form state for the add/edit modals.

A modal holds exactly one `FormState` and swaps it for the next one on every
transition:

    idle -> editing -> submitting -> idle
                                  -> error -> editing | submitting

`cancel()` is allowed from anywhere and goes back to idle.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from api.models import ROLES, Product, User

V = TypeVar("V")


class FormPhase(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    ERROR = "error"


class FormTransitionError(ValueError):
    pass


@dataclass(frozen=True)
class FormState(Generic[V]):
    values: V
    phase: FormPhase = FormPhase.IDLE
    target_id: Optional[str] = None  # None while creating
    error: Optional[str] = None

    @property
    def is_editing_existing(self) -> bool:
        return self.target_id is not None

    def _move(self, allowed, phase: FormPhase, **changes) -> FormState[V]:
        if self.phase not in allowed:
            raise FormTransitionError(f"cannot go from {self.phase.value} to {phase.value}")
        return dataclasses.replace(self, phase=phase, **changes)

    def open(self, values: V, target_id: Optional[str] = None) -> FormState[V]:
        return self._move(
            (FormPhase.IDLE,),
            FormPhase.EDITING,
            values=values,
            target_id=target_id,
            error=None,
        )

    def change(self, values: V) -> FormState[V]:
        return self._move(
            (FormPhase.EDITING, FormPhase.ERROR), FormPhase.EDITING, values=values
        )

    def submit(self) -> FormState[V]:
        return self._move(
            (FormPhase.EDITING, FormPhase.ERROR), FormPhase.SUBMITTING, error=None
        )

    def succeed(self, blank: V) -> FormState[V]:
        return self._move(
            (FormPhase.SUBMITTING,), FormPhase.IDLE, values=blank, target_id=None
        )

    def fail(self, message: str) -> FormState[V]:
        return self._move(
            (FormPhase.SUBMITTING, FormPhase.EDITING), FormPhase.ERROR, error=message
        )

    def cancel(self, blank: V) -> FormState[V]:
        return dataclasses.replace(
            self, phase=FormPhase.IDLE, values=blank, target_id=None, error=None
        )


# ---------------------------
# Per entity values
# ---------------------------


@dataclass(frozen=True)
class ProductFormValues:
    name: str = ""
    description: str = ""
    price: str = ""
    stock: str = ""

    @classmethod
    def of(cls, product: Product) -> ProductFormValues:
        return cls(product.name, product.description, str(product.price), str(product.stock))

    def to_payload(self) -> Dict[str, Any]:
        """Raises ValueError with a user facing message on bad input."""
        name = self.name.strip()
        if not name:
            raise ValueError("Name is required")
        try:
            price = float(self.price)
        except ValueError:
            raise ValueError("Price must be a number") from None
        if not math.isfinite(price):
            raise ValueError("Price must be a number")
        try:
            stock = int(self.stock)
        except ValueError:
            raise ValueError("Stock must be a whole number") from None
        if price < 0:
            raise ValueError("Price cannot be negative")
        if stock < 0:
            raise ValueError("Stock cannot be negative")

        return {
            "name": name,
            "description": self.description.strip(),
            "price": price,
            "stock": stock,
        }


@dataclass(frozen=True)
class UserFormValues:
    username: str = ""
    password: str = ""
    role: str = "user"

    @classmethod
    def of(cls, user: User) -> UserFormValues:
        # password is never prefilled
        return cls(user.username, "", user.role)

    def to_payload(self, editing: bool) -> Dict[str, Any]:
        username = self.username.strip()
        if not username:
            raise ValueError("Username is required")
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role}")

        payload = {"username": username, "role": self.role}
        if self.password:
            payload["password"] = self.password
        elif not editing:
            raise ValueError("Password is required")
        return payload
