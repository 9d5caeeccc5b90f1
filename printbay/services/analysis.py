# printbay/services/analysis.py

import random
from typing import Optional

from printbay.schemas.analysis import Dimensions, ModelAnalysisRequest, ModelAnalysisResult
from printbay.utils.hashing import now_ms


def analyze_model(request: ModelAnalysisRequest, rng: Optional[random.Random] = None) -> ModelAnalysisResult:
    """
    Placeholder geometry for the analyze endpoint: the server never sees the
    mesh here, only its name and size, so the numbers are drawn at random.
    Real measurements come from `printbay.client.geometry.measure_mesh`.
    """
    r = rng or random
    return ModelAnalysisResult(
        analysis_id=f"analysis-{now_ms()}",
        file_name=request.file_name,
        vertices=r.randint(1000, 51000),
        faces=r.randint(2000, 102000),
        volume=round(r.uniform(1, 101), 2),
        dimensions=Dimensions(
            x=round(r.uniform(10, 210), 2),
            y=round(r.uniform(10, 210), 2),
            z=round(r.uniform(10, 210), 2),
        ),
        analysis_time=r.randint(1000, 6000),
    )
