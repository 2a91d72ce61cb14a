from __future__ import annotations
import secrets
import string
from typing import Callable

CODE_ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 8

CodeGenerator = Callable[[], str]


def generate_code(length: int = CODE_LENGTH) -> str:
    """
    Random alphanumeric code drawn with `secrets`, so codes of other users
    cannot be guessed from ones already seen.

    Uniqueness is not checked here; the store's unique index decides.
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
