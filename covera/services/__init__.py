"""Services package — all business logic lives here, never in routers.

Files:
  status.py           — compliance status derivation (the only date math for status)
  normalizer.py       — raw AI extraction -> record patches, merge rules
  text_extraction.py  — pdfplumber text with byte-strip fallback
  prompts.py          — extraction prompts per document kind
  openai_service.py   — DocumentExtractionClient (OpenAI chat completions)
  extraction.py       — analyze-only flow (no storage)
  storage.py          — local blob store for uploaded documents
  activity.py         — vendor activity log + notifications
  vendor.py           — vendor CRUD, COI upload / removal
  contract.py         — contract CRUD, document upload
  reports.py          — summary, reminders, CSV export

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
