# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Root conftest — loguru capture and default markers."""

import pytest
from loguru import logger


def pytest_collection_modifyitems(config, items):
    for item in items:
        if "integration" not in item.keywords and "unit" not in item.keywords:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def log_messages():
    """Collect loguru records emitted during the test as (level, message)."""
    records: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda message: records.append(
            (message.record["level"].name, message.record["message"])
        ),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
