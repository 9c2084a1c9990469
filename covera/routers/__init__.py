"""Routers package — HTTP endpoint definitions.

Files:
  uploads.py  — shared multipart upload validation
  v1/         — Versioned API routes (/api/v1/*)
"""
