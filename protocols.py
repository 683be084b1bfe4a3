# protocols.py
from constants import FormulaChoice, PEDIATRIC_CUTOFF

class FormulaSelector:
    @staticmethod
    def select(age: float) -> FormulaChoice:
        # Assumes validated age. The only branch point between the adult
        # and pediatric pipelines (equation and required fields).
        if age >= PEDIATRIC_CUTOFF.ADULT_AGE_YEARS:
            return FormulaChoice.ADULT_CKD_EPI_2021
        # Bedside Schwartz was derived in children; needs height
        return FormulaChoice.PEDIATRIC_SCHWARTZ_2009

    @staticmethod
    def requires_height(age: float) -> bool:
        """Lets the form mark height as mandatory while the user is typing."""
        return FormulaSelector.select(age) == FormulaChoice.PEDIATRIC_SCHWARTZ_2009
