"""Schemas shared by every list endpoint."""

from pydantic import BaseModel


class Metadata(BaseModel):
    """Paging summary derived from the window count of a page query."""

    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_pages: int = 0
    total_records: int = 0


class MessageEnvelope(BaseModel):
    message: str
