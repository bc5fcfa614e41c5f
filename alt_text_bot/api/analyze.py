# alt_text_bot/api/analyze.py

from fastapi import APIRouter, Body, status
import logging

from ..schemas import ScanRequest, ScanResponse
from ..rules.alt_text import scan

router = APIRouter()

logger = logging.getLogger("alt_text_bot.api.analyze")


@router.post("/scan", response_model=ScanResponse, status_code=status.HTTP_200_OK)
async def scan_content(request: ScanRequest = Body(...)):
    """
    Scans a piece of post markup and returns the defects found, without
    reading or writing any comments. Useful for previewing what the bot will say.
    """
    logger.info(f"API Request: POST /scan | {len(request.content)} characters")
    report = scan(request.content)
    return ScanResponse(has_issues=report.has_issues, counts=report.counts(), report=report)
