import io

import pytest


@pytest.fixture  # type: ignore[misc]
def transcript() -> io.StringIO:
    return io.StringIO()
