"""Core package — settings, exceptions, pagination and response envelopes."""
