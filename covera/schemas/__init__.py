"""Pydantic schemas package.

Folder intent:
  common.py      — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  vendor.py      — Vendor record, insurance policies, document references
  contract.py    — Contract record with milestones / deliverables / SLAs
  extraction.py  — normalized extraction patches and upload responses
  activity.py    — vendor activity log + notifications
  report.py      — compliance summary and reminder rows
"""
