# printbay/routes/models.py
import logging
import random

from fastapi import APIRouter, Depends

from printbay.dependencies import get_rng
from printbay.schemas.analysis import ModelAnalysisRequest
from printbay.services.analysis import analyze_model
from printbay.utils.responses import json_errors, success_response

router = APIRouter()
log = logging.getLogger("uvicorn.error")


@router.post("/models-analyze")
@json_errors("Model analysis failed")
async def models_analyze(payload: ModelAnalysisRequest, rng: random.Random = Depends(get_rng)):
    log.info("🔍 Analyzing %s (%d bytes, %s)", payload.file_name, payload.file_size, payload.analysis_level)
    return success_response(analyze_model(payload, rng))
