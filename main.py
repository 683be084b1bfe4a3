# main.py

import logging
from typing import Optional, List, Union
from datetime import datetime
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from constants import VERSION, EGFR_UNIT
from models import ValidationFailure
from engine import EGFREngine
from staging import StageClassifier

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("nephroflow-api")

app = FastAPI(
    title="NephroFlow API",
    version=VERSION,
    description="eGFR calculation (CKD-EPI 2021 / Bedside Schwartz 2009) with KDIGO 2024 staging. \n\n"
                "**WARNING**: Decision Support Tool Only. Interpret results in clinical context.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"status": "active", "message": "NephroFlow API is running successfully!"}

@app.get("/health")
def health_check():
    """K8s/AWS Health Probe"""
    return {"status": "active", "version": VERSION, "module": "nephroflow-egfr-engine"}

# --- 2. INPUT SCHEMA ---
# Fields stay loosely typed on purpose: the engine reports "required" /
# "must be a number" per field, so the shell gets every error in one go.
class CalculationRequest(BaseModel):
    age: Optional[Union[float, str]] = Field(None, description="Age in years")
    sex: Optional[str] = Field(None, description="'male' or 'female'")
    creatinine: Optional[Union[float, str]] = Field(None, description="Serum creatinine")
    creatinine_unit: Optional[str] = Field("mg/dL", description="'mg/dL' or 'µmol/L'")
    height: Optional[Union[float, str]] = Field(None, description="Height in cm, required below 18 years")

    class Config:
        json_schema_extra = {
            "example": {
                "age": 70, "sex": "male", "creatinine": 1.0, "creatinine_unit": "mg/dL"
            }
        }

# --- 3. RESPONSE SCHEMA ---
class CalculationResponse(BaseModel):
    egfr: int
    unit: str = EGFR_UNIT
    formula: str
    formula_name: str
    stage: str
    stage_label: str
    risk_tier: str
    color_token: str
    human_readable_summary: str
    engine_version: str = VERSION
    generated_at: datetime = Field(default_factory=datetime.now)

class StageBand(BaseModel):
    code: str
    min_egfr: Optional[int]
    label: str
    risk_tier: str
    color_token: str

# --- 4. ENDPOINTS ---

@app.post("/calculate", response_model=CalculationResponse)
def calculate_egfr(request: CalculationRequest):
    """
    Estimates GFR from the raw form fields and stages it (KDIGO 2024).
    Returns 422 with every failing field if the input is rejected.
    """
    try:
        result = EGFREngine.calculate_from_form(request.model_dump())
    except Exception as e:
        logger.error(f"Internal Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Calculation Engine Error")

    if isinstance(result, ValidationFailure):
        logger.warning(f"Clinical Validation Error on fields: {sorted(result.errors)}")
        raise HTTPException(
            status_code=422,
            detail={"message": "Clinical Validation Error", "errors": result.errors},
        )

    return CalculationResponse(
        **result.to_dict(),
        human_readable_summary=EGFREngine.build_summary(result),
    )

@app.get("/stages", response_model=List[StageBand])
def list_stages():
    """KDIGO 2024 GFR categories, highest first."""
    return [
        StageBand(
            code=stage.code.value,
            min_egfr=lower_bound,
            label=stage.label,
            risk_tier=stage.risk_tier.value,
            color_token=stage.color_token,
        )
        for lower_bound, stage in StageClassifier.bands()
    ]
