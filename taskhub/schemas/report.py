from pydantic import BaseModel
from typing import Optional


class PdfReportRequest(BaseModel):
    html: Optional[str] = None
    filename: Optional[str] = None
    title: Optional[str] = None
