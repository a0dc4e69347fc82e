"""Pydantic schemas for estimates and health scores crossing a process boundary."""
