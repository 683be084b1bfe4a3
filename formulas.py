"""
NephroFlow: eGFR Equations
==========================
The two published creatinine equations. Pure numeric functions: they
expect canonical (mg/dL) creatinine and already-validated inputs.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

from constants import Sex, CKD_EPI_2021, SCHWARTZ_2009


def round_half_up(value: float) -> int:
    """
    Rounds to the nearest integer, halves away from zero.
    Built-in round() uses banker's rounding (round(80.5) == 80).
    Decimal(value) is the exact binary value, so nothing is rounded twice.
    Raises OverflowError for inf/nan, which have no integer to round to.
    """
    if not math.isfinite(value):
        raise OverflowError(f"eGFR is not finite: {value}")
    with localcontext() as ctx:
        # A finite double has at most 309 integer digits
        ctx.prec = 400
        return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class EGFRFormulas:
    """
    Returns eGFR in mL/min/1.73 m², rounded to an integer.
    """

    @staticmethod
    def ckd_epi_2021(creatinine_mg_dl: float, age: float, sex: Sex) -> int:
        """
        CKD-EPI 2021 creatinine equation (race-free).
        The race coefficient of the 2009 version is intentionally absent.
        """
        coeffs = CKD_EPI_2021.COEFFICIENTS[sex]

        ratio = creatinine_mg_dl / coeffs.kappa
        min_term = min(ratio, 1.0)
        max_term = max(ratio, 1.0)

        egfr = (
            CKD_EPI_2021.BASE
            * min_term ** coeffs.alpha
            * max_term ** CKD_EPI_2021.MAX_EXPONENT
            * CKD_EPI_2021.AGE_DECAY ** age
            * coeffs.sex_factor
        )
        return round_half_up(egfr)

    @staticmethod
    def schwartz_2009(creatinine_mg_dl: float, height_cm: float) -> int:
        # Creatinine > 0 is guaranteed by validate_creatinine upstream
        egfr = (SCHWARTZ_2009.K * height_cm) / creatinine_mg_dl
        return round_half_up(egfr)
