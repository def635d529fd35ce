# Prescriptions domain module
from medidispense.domain.prescriptions.models import (
    Prescription,
    PrescriptionStatus,
    TERMINAL_STATUSES,
)

__all__ = [
    "Prescription",
    "PrescriptionStatus",
    "TERMINAL_STATUSES",
]
