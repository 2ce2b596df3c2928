from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from doctldr.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    setup_logging(force=True)
