"""Test helpers for Project Calendar tests.

    from tests.helpers import (
        make_now, create_mock_project_data, create_mock_todo_data,
        sequential_ids, seed_storage, stored, setup_integration,
    )
"""

from tests.helpers.factories import (
    create_mock_project_data,
    create_mock_todo_data,
    make_now,
    seed_storage,
    sequential_ids,
    stored,
)
from tests.helpers.setup import SetupResult, setup_integration

__all__ = [
    "SetupResult",
    "create_mock_project_data",
    "create_mock_todo_data",
    "make_now",
    "seed_storage",
    "sequential_ids",
    "setup_integration",
    "stored",
]
