"""Test utilities for contractmock servers::

    from contractmock.testing import TestClient
"""

from contractmock.testing.client import TestClient

__all__ = ["TestClient"]
