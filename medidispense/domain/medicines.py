"""
Registry of the medicines a prescription can order.

A prescription carries one quantity field per medicine below, while the
inventory holds an open-ended list of named slots. The two meet only through
:func:`find_slot`, which matches a slot's free-text medicine name against the
enum's display name, ignoring case and surrounding whitespace.
"""
from typing import Dict, Iterable, Mapping, Optional, TypeVar
import enum


class Medicine(str, enum.Enum):
    """Medicines with a dedicated quantity field on a prescription"""
    PARACETAMOL = "paracetamol"
    AZITHROMYCIN = "azithromycin"
    REVITAL = "revital"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


S = TypeVar("S")


def normalize_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def find_slot(slots: Iterable[S], medicine: Medicine) -> Optional[S]:
    """Return the first slot loaded with ``medicine``, or None"""
    wanted = normalize_name(medicine.value)
    for slot in slots:
        if normalize_name(getattr(slot, "medicine", None)) == wanted:
            return slot
    return None


def quantities_of(source) -> Dict[str, int]:
    """Read the per-medicine quantities off a prescription, schema or mapping"""
    quantities = {}
    for medicine in Medicine:
        if isinstance(source, Mapping):
            value = source.get(medicine.value)
        else:
            value = getattr(source, medicine.value, None)
        quantities[medicine.value] = int(value or 0)
    return quantities


DEFAULT_SLOT_MEDICINES = [medicine.display_name for medicine in Medicine]
