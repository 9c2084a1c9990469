"""Repositories package — the only code that touches the KV store.

Files:
  kv.py        — KVStore: get / set / get_by_prefix / delete / mdel
  base.py      — RecordRepository: org-scoped CRUD over namespaced keys
  vendor.py    — VendorRepository
  contract.py  — ContractRepository
  activity.py  — ActivityRepository, NotificationRepository
"""
