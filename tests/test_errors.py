import pytest

from app.errors import (
    AlreadyDecided,
    ErrorKind,
    InvalidInput,
    ItemNotOpen,
    LostFoundError,
    NotFound,
    Unauthorized,
)
from app.main import ERROR_STATUS


@pytest.mark.parametrize(
    "error, kind",
    [
        (NotFound("Item", 1), ErrorKind.NOT_FOUND),
        (ItemNotOpen(1, "CLAIMED"), ErrorKind.ITEM_NOT_OPEN),
        (AlreadyDecided(1, "APPROVED"), ErrorKind.ALREADY_DECIDED),
        (Unauthorized("Only the finder can decide"), ErrorKind.UNAUTHORIZED),
        (InvalidInput("Date not parseable"), ErrorKind.INVALID_INPUT),
    ],
)
def test_every_error_has_a_kind_and_status(error, kind) -> None:
    assert isinstance(error, LostFoundError)
    assert error.kind == kind
    assert kind in ERROR_STATUS


def test_messages_carry_context() -> None:
    assert NotFound("Claim", "abc").message == "Claim not found (abc)"
    assert NotFound("User").message == "User not found"
    assert "CLAIMED" in ItemNotOpen("x", "CLAIMED").message
    assert AlreadyDecided("c1", "REJECTED").status == "REJECTED"


def test_default_message() -> None:
    assert Unauthorized().message == "unauthorized"
