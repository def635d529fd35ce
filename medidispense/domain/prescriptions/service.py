from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from medidispense.core.config import settings
from medidispense.core.exceptions import NotFoundError, PrescriptionRejectedError, ValidationError
from medidispense.domain.dispensing_logs.models import DispenseOutcome
from medidispense.domain.dispensing_logs.service import (
    DispensingLogService,
    LogWriteResult,
    NO_ACTIVE_PRESCRIPTION,
)
from medidispense.domain.inventory.models import Inventory, InventorySlot
from medidispense.domain.inventory.repository import InventoryRepository
from medidispense.domain.inventory.service import InventoryService
from medidispense.domain.medicines import Medicine, find_slot, quantities_of
from medidispense.domain.prescriptions.models import Prescription, PrescriptionStatus, TERMINAL_STATUSES
from medidispense.domain.prescriptions.repository import PrescriptionRepository
from medidispense.infrastructure.redis import get_lock_service, INVENTORY_LOCK

logger = logging.getLogger(__name__)

DUPLICATE_PENDING_MESSAGE = "A pending prescription already exists for this patient."


@dataclass
class StockIssue:
    code: str
    medicine: str
    message: str


@dataclass
class StockCheck:
    errors: List[StockIssue] = field(default_factory=list)
    alerts: List[StockIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


def check_stock(
    slots: Iterable[InventorySlot],
    quantities: Dict[str, int],
    low_stock_threshold: int,
) -> StockCheck:
    """
    Check every requested medicine against its slot.

    All medicines are checked even after the first error so the caller gets
    the full list. Low-stock alerts are measured on the stock before any debit.
    """
    slots = list(slots)
    check = StockCheck()

    for medicine in Medicine:
        qty = quantities.get(medicine.value, 0)
        if qty <= 0:
            continue

        name = medicine.value
        slot = find_slot(slots, medicine)
        if slot is None:
            check.errors.append(StockIssue(
                "NOT_STOCKED", name, f"{name} is not loaded in any dispenser slot."
            ))
        elif slot.stock == 0:
            check.errors.append(StockIssue(
                "OUT_OF_STOCK", name, f"{name} is out of stock and cannot be prescribed."
            ))
        elif qty > slot.stock:
            check.errors.append(StockIssue(
                "INSUFFICIENT_STOCK", name, f"Cannot prescribe {qty} of {name}. Only {slot.stock} in stock."
            ))
        elif slot.stock < low_stock_threshold:
            check.alerts.append(StockIssue(
                "LOW_STOCK", name, f"Refill alert: {name} stock is low ({slot.stock})."
            ))

    return check


class PrescriptionService:
    """
    Prescription ledger and the create/dispense transaction.

    Every method that reads-then-writes prescriptions or stock holds the
    inventory lock for the whole sequence.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = PrescriptionRepository(db)
        self.inventory = InventoryService(db)
        self.inventory_repo = InventoryRepository(db)
        self.logs = DispensingLogService(db)

    async def create_prescription(self, tag_id: str, data: dict) -> Tuple[Prescription, List[str]]:
        """
        Create a Pending prescription if stock allows it, debiting the slots.

        Returns the prescription and the low-stock alerts. Raises
        PrescriptionRejectedError with every error and alert otherwise; in that
        case nothing has been written.
        """
        quantities = quantities_of(data)

        async with get_lock_service().lock(INVENTORY_LOCK):
            if await self.repo.get_latest_pending(tag_id):
                logger.info(f"Rejected prescription for {tag_id}: pending prescription exists")
                raise PrescriptionRejectedError(
                    errors=[DUPLICATE_PENDING_MESSAGE],
                    codes=["DUPLICATE_PENDING"],
                    error_code="DUPLICATE_PENDING"
                )

            inventory = await self.inventory.load()
            check = check_stock(inventory.slots, quantities, settings.LOW_STOCK_THRESHOLD)
            alerts = [issue.message for issue in check.alerts]

            if not check.passed:
                logger.info(
                    f"Rejected prescription for {tag_id}: "
                    + ", ".join(issue.code for issue in check.errors)
                )
                raise PrescriptionRejectedError(
                    errors=[issue.message for issue in check.errors],
                    alerts=alerts,
                    codes=[issue.code for issue in check.errors],
                )

            await self._debit(inventory, quantities)

            # the commit here also carries the staged slot debits
            prescription = await self.repo.create({
                "tag_id": tag_id,
                **quantities,
                "frequency": data["frequency"],
                "duration": data["duration"],
                "status": PrescriptionStatus.PENDING,
            })

        for alert in alerts:
            logger.warning(alert)
        logger.info(f"Created prescription {prescription.id} for {tag_id}")
        return prescription, alerts

    async def _debit(self, inventory: Inventory, quantities: Dict[str, int]) -> None:
        for medicine in Medicine:
            qty = quantities.get(medicine.value, 0)
            if qty > 0:
                slot = find_slot(inventory.slots, medicine)
                slot.debit(qty)
        await self.inventory_repo.stage(inventory)

    async def _refund(self, prescription: Prescription) -> None:
        inventory = await self.inventory.load()
        for medicine, qty in quantities_of(prescription).items():
            slot = find_slot(inventory.slots, Medicine(medicine))
            if slot is not None and qty > 0:
                slot.credit(qty)
        await self.inventory_repo.stage(inventory)

    async def get_pending(self, tag_id: str) -> Prescription:
        prescription = await self.repo.get_latest_pending(tag_id)
        if prescription is None:
            raise NotFoundError(message=NO_ACTIVE_PRESCRIPTION, details={"tag_id": tag_id})
        return prescription

    async def list_prescriptions(
        self,
        status: Optional[PrescriptionStatus] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Prescription]:
        return await self.repo.list_all(status=status, skip=skip, limit=limit)

    async def dispense(self, tag_id: str) -> Prescription:
        """
        Mark the latest Pending prescription Dispensed and audit the attempt.

        Stock is not touched; it was debited when the prescription was
        created. A lost audit entry never fails the call.
        """
        async with get_lock_service().lock(INVENTORY_LOCK):
            prescription = await self.repo.get_latest_pending(tag_id)

            if prescription is None:
                result = await self.logs.try_append(
                    tag_id,
                    DispenseOutcome.FAILURE,
                    error_message=NO_ACTIVE_PRESCRIPTION,
                )
                self._warn_if_unlogged(tag_id, result)
                raise NotFoundError(message=NO_ACTIVE_PRESCRIPTION, details={"tag_id": tag_id})

            prescription.status = PrescriptionStatus.DISPENSED
            prescription.last_dispensed = datetime.utcnow()
            prescription = await self.repo.save(prescription)

            result = await self.logs.try_append(
                tag_id,
                DispenseOutcome.SUCCESS,
                medicines=quantities_of(prescription),
            )
            if not self._warn_if_unlogged(tag_id, result):
                await self.db.refresh(prescription)

        logger.info(f"Dispensed prescription {prescription.id} for {tag_id}")
        return prescription

    async def set_status(self, tag_id: str, status: PrescriptionStatus) -> Prescription:
        """Manually cancel or force-dispense the latest Pending prescription"""
        target = next((s for s in TERMINAL_STATUSES if s == status), None)
        if target is None:
            raise ValidationError(
                message=f"Status must be one of: {', '.join(s.value for s in TERMINAL_STATUSES)}",
                details={"status": str(getattr(status, "value", status))},
            )
        status = target

        async with get_lock_service().lock(INVENTORY_LOCK):
            prescription = await self.get_pending(tag_id)

            if status == PrescriptionStatus.CANCELLED and settings.REFUND_STOCK_ON_CANCEL:
                await self._refund(prescription)
            if status == PrescriptionStatus.DISPENSED:
                prescription.last_dispensed = datetime.utcnow()

            prescription.status = status
            prescription = await self.repo.save(prescription)

        logger.info(f"Prescription {prescription.id} for {tag_id} set to {status.value}")
        return prescription

    @staticmethod
    def _warn_if_unlogged(tag_id: str, result: LogWriteResult) -> bool:
        if not result.ok:
            logger.warning(f"Failed to write dispensing log for {tag_id}: {result.error}")
        return result.ok
