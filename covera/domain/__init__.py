"""Domain package — ORM models are imported here so ``init_db`` sees them.

Folder intent:
  kv.py  — the single kv_store table every record lives in
"""

from covera.domain.kv import KVEntry

__all__ = ["KVEntry"]
