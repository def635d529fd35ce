from fastapi import APIRouter

from medidispense.api.v1.patients import routes as patients
from medidispense.api.v1.inventory import routes as inventory
from medidispense.api.v1.prescriptions import routes as prescriptions
from medidispense.api.v1.dispensing_logs import routes as dispensing_logs
from medidispense.api.v1.hardware import routes as hardware

api_router = APIRouter()
api_router.include_router(patients.router)
api_router.include_router(inventory.router)
api_router.include_router(prescriptions.router)
api_router.include_router(dispensing_logs.router)
api_router.include_router(hardware.router)
