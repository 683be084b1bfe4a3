from enum import Enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple
VERSION = "1.0.0"

class Sex(Enum):
    MALE = "male"
    FEMALE = "female"

class CreatinineUnit(Enum):
    MG_DL = "mg/dL"       # Canonical unit, what every formula expects
    UMOL_L = "µmol/L"     # SI unit used by most labs outside the US

class FormulaChoice(Enum):
    ADULT_CKD_EPI_2021 = "ckd_epi_2021"
    PEDIATRIC_SCHWARTZ_2009 = "bedside_schwartz_2009"

class StageCode(Enum):
    G1 = "G1"
    G2 = "G2"
    G3A = "G3a"
    G3B = "G3b"
    G4 = "G4"
    G5 = "G5"

class RiskTier(Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"

@dataclass(frozen=True)
class StageInfo:
    code: StageCode
    label: str
    risk_tier: RiskTier
    color_token: str  # Presentation hint for the shell, never read by the engine

@dataclass(frozen=True)
class CKDEPICoefficients:
    kappa: float
    alpha: float
    sex_factor: float

@dataclass(frozen=True)
class FormulaProperties:
    name: str
    population: str
    requires_height: bool = False

class VALIDATION_LIMITS:
    # Age (years)
    AGE_MIN = 1.0
    AGE_MAX = 120.0          # Above this we ask to verify; still blocks calculation

    # Creatinine upper limits are unit-specific, never cross-apply them
    CREATININE_MAX = MappingProxyType({
        CreatinineUnit.MG_DL: 20.0,
        CreatinineUnit.UMOL_L: 1768.0,
    })

    # Height (cm), only checked on the pediatric path
    HEIGHT_MIN_CM = 30.0
    HEIGHT_MAX_CM = 250.0

class UNIT_CONSTANTS:
    UMOL_L_PER_MG_DL = 88.4  # Creatinine molar conversion, never rounded

class CKD_EPI_2021:
    """
    2021 race-free CKD-EPI creatinine equation (Inker et al., NEJM 2021).
    eGFR = 142 x min(Scr/k, 1)^a x max(Scr/k, 1)^-1.200 x 0.9938^age x sex_factor
    """
    BASE = 142.0
    MAX_EXPONENT = -1.200
    AGE_DECAY = 0.9938
    COEFFICIENTS = MappingProxyType({
        Sex.FEMALE: CKDEPICoefficients(kappa=0.7, alpha=-0.241, sex_factor=1.012),
        Sex.MALE: CKDEPICoefficients(kappa=0.9, alpha=-0.302, sex_factor=1.0),
    })

class SCHWARTZ_2009:
    # Bedside Schwartz: eGFR = k x height(cm) / Scr(mg/dL)
    K = 0.413

class PEDIATRIC_CUTOFF:
    ADULT_AGE_YEARS = 18.0  # age >= 18 -> adult equation

class FORMULA_LIBRARY:
    """
    Display metadata for each equation the engine can run.
    """
    SPECS = MappingProxyType({
        FormulaChoice.ADULT_CKD_EPI_2021: FormulaProperties(
            name="CKD-EPI 2021",
            population="Adults (age >= 18 years)"
        ),
        FormulaChoice.PEDIATRIC_SCHWARTZ_2009: FormulaProperties(
            name="Bedside Schwartz 2009",
            population="Children (age 1-17 years)",
            requires_height=True
        ),
    })

    @staticmethod
    def get(choice: FormulaChoice) -> FormulaProperties:
        return FORMULA_LIBRARY.SPECS[choice]

# KDIGO 2024 GFR categories, highest band first.
# (lower bound inclusive, stage). None = catch-all bottom band.
STAGE_BANDS: Tuple[Tuple[Optional[int], StageInfo], ...] = (
    (90, StageInfo(StageCode.G1, "Normal or high", RiskTier.LOW, "bg-green-500")),
    (60, StageInfo(StageCode.G2, "Mildly decreased", RiskTier.LOW, "bg-green-400")),
    (45, StageInfo(StageCode.G3A, "Mild to moderately decreased", RiskTier.MODERATE, "bg-yellow-500")),
    (30, StageInfo(StageCode.G3B, "Moderate to severely decreased", RiskTier.HIGH, "bg-orange-500")),
    (15, StageInfo(StageCode.G4, "Severely decreased", RiskTier.VERY_HIGH, "bg-red-500")),
    (None, StageInfo(StageCode.G5, "Kidney failure", RiskTier.VERY_HIGH, "bg-red-700")),
)

EGFR_UNIT = "mL/min/1.73 m²"

CLINICAL_NOTE = (
    "This result should be interpreted in clinical context. "
    "CKD diagnosis requires abnormalities present for >3 months."
)
