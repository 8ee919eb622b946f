"""
Pydantic schemas for payload validation and API responses.
"""
