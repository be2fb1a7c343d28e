"""Consultation queue: admission, session lifecycle and doctor presence."""
