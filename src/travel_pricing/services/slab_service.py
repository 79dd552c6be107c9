"""
Slab Service - CRUD operations for markup slabs.
Handles reading/writing markup_slabs.csv with validation before every write.
"""
import csv
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..engine.errors import ConfigValidationError
from ..engine.models import MarkupSlab
from ..engine.validation import ValidationResult, ensure_valid, validate_slab
from ..utils.logger import get_logger
from .config_loader import load_markup_slabs

logger = get_logger(__name__)


def _num(value: float) -> str:
    """Render a number without a trailing .0 or exponent."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def slab_to_csv_row(slab: MarkupSlab) -> dict:
    """Convert to CSV row format."""
    return {
        'id': slab.id,
        'name': slab.name,
        'min_amount': _num(slab.min_amount),
        'max_amount': _num(slab.max_amount),
        'markup_type': slab.markup_type,
        'markup_value': _num(slab.markup_value),
        'currency': slab.currency,
        'is_active': 'true' if slab.is_active else 'false',
        'created_at': slab.created_at or '',
        'updated_at': slab.updated_at or '',
    }


class SlabService:
    """Service for managing markup slabs."""

    CSV_COLUMNS = [
        'id', 'name', 'min_amount', 'max_amount', 'markup_type',
        'markup_value', 'currency', 'is_active', 'created_at', 'updated_at'
    ]

    def __init__(self, slabs_csv_path: Path):
        self.slabs_csv_path = slabs_csv_path

    def list_slabs(self, include_inactive: bool = True, currency: Optional[str] = None) -> list[MarkupSlab]:
        """List slabs in stored order."""
        slabs = load_markup_slabs(self.slabs_csv_path)
        if not include_inactive:
            slabs = [s for s in slabs if s.is_active]
        if currency:
            slabs = [s for s in slabs if s.currency == currency.upper()]
        return slabs

    def get_slab(self, slab_id: str) -> Optional[MarkupSlab]:
        """Get a single slab by ID."""
        for slab in self.list_slabs():
            if slab.id == slab_id:
                return slab
        return None

    def validate_slab(self, slab: MarkupSlab) -> ValidationResult:
        """Validate a slab against the stored set without saving."""
        return validate_slab(slab, self.list_slabs())

    def create_slab(self, slab: MarkupSlab) -> MarkupSlab:
        """Create a new slab; rejects invalid or overlapping ranges."""
        slabs = self.list_slabs()
        if not slab.id:
            slab = replace(slab, id=self._generate_slab_id(slab, slabs))

        if any(s.id == slab.id for s in slabs):
            raise ValueError(f"Slab with ID '{slab.id}' already exists")

        self._ensure_valid(slab, slabs)

        now = datetime.now().isoformat(timespec='seconds')
        slab = replace(slab, currency=slab.currency.upper(), created_at=slab.created_at or now, updated_at=now)
        slabs.append(slab)
        self._write_slabs(slabs)
        logger.info("Created slab %s (%s)", slab.id, slab.name)
        return slab

    def update_slab(self, slab_id: str, updates: dict) -> MarkupSlab:
        """Update an existing slab, re-validating the result."""
        slabs = self.list_slabs()

        for i, slab in enumerate(slabs):
            if slab.id == slab_id:
                changes = {k: v for k, v in updates.items() if hasattr(slab, k) and k not in ('id', 'created_at')}
                updated = replace(slab, **changes)
                updated = replace(
                    updated,
                    currency=updated.currency.upper(),
                    updated_at=datetime.now().isoformat(timespec='seconds'),
                )
                self._ensure_valid(updated, slabs)
                slabs[i] = updated
                self._write_slabs(slabs)
                logger.info("Updated slab %s", slab_id)
                return updated

        raise ValueError(f"Slab with ID '{slab_id}' not found")

    def set_active(self, slab_id: str, is_active: bool) -> MarkupSlab:
        """Activate or deactivate a slab. Activation is checked for overlaps."""
        return self.update_slab(slab_id, {'is_active': is_active})

    def delete_slab(self, slab_id: str) -> bool:
        """Delete a slab."""
        slabs = self.list_slabs()
        remaining = [s for s in slabs if s.id != slab_id]

        if len(remaining) == len(slabs):
            raise ValueError(f"Slab with ID '{slab_id}' not found")

        self._write_slabs(remaining)
        logger.info("Deleted slab %s", slab_id)
        return True

    def get_stats(self) -> dict:
        """Get statistics about slabs."""
        slabs = self.list_slabs()
        by_currency = {}
        for s in slabs:
            by_currency[s.currency] = by_currency.get(s.currency, 0) + 1
        active = [s for s in slabs if s.is_active]
        return {
            'total': len(slabs),
            'active': len(active),
            'inactive': len(slabs) - len(active),
            'by_currency': by_currency,
        }

    def _ensure_valid(self, slab: MarkupSlab, slabs: list[MarkupSlab]):
        result = validate_slab(slab, slabs)
        try:
            ensure_valid(result, f"slab '{slab.id}'")
        except ConfigValidationError:
            logger.info("Rejected slab %s: %s", slab.id, "; ".join(result.errors))
            raise

    def _generate_slab_id(self, slab: MarkupSlab, slabs: list[MarkupSlab]) -> str:
        """Generate a unique slab ID like 'THB-5000-10000'."""
        base = f"{slab.currency.upper()}-{_num(slab.min_amount)}-{_num(slab.max_amount)}"
        existing_ids = {s.id for s in slabs}
        candidate = base
        counter = 1
        while candidate in existing_ids:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    def _write_slabs(self, slabs: list[MarkupSlab]):
        """Write slabs back to CSV."""
        self.slabs_csv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.slabs_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for slab in slabs:
                writer.writerow(slab_to_csv_row(slab))
