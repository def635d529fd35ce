from medidispense.domain.patients.models import Patient
from medidispense.domain.inventory.models import Inventory, InventorySlot
from medidispense.domain.prescriptions.models import Prescription
from medidispense.domain.dispensing_logs.models import DispensingLog
