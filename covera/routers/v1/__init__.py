"""v1 router package — all /api/v1/* endpoints live here.

Files:
  vendors.py        — vendor CRUD, activities, COI upload / removal
  contracts.py      — contract CRUD, document upload
  documents.py      — analyze-only AI extraction
  notifications.py  — in-app notifications
  reports.py        — compliance summary, reminders, CSV export

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to covera/services/.
"""
