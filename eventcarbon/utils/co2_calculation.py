"""
Event CO2 Composer
Prices one already-decided quantity per domain and assembles a combined
breakdown for an event.

The grand total has two sources. A total already computed and stored
elsewhere is authoritative when supplied; otherwise the sum of the four domain
totals is used. Both figures are returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from eventcarbon.utils.aggregation import total
from eventcarbon.utils.catering import estimate_catering_emissions
from eventcarbon.utils.factors import DisposalMethod, PowerSource, WasteType
from eventcarbon.utils.power import calculate_power_emissions
from eventcarbon.utils.transport import estimate_transport_emissions
from eventcarbon.utils.validation import check_number, get_field, require_record
from eventcarbon.utils.waste import calculate_waste_emissions

TOTAL_SOURCE_STORED = 'stored'
TOTAL_SOURCE_RECOMPUTED = 'recomputed'

GRAMS_PER_KG = Decimal('1000')


@dataclass
class EventEmissionData:
    energy_kwh: Any
    waste_kg: Any
    num_participants: Any
    catering_meals: Any
    total_co2: Any = None

    @classmethod
    def from_value(cls, raw: Any) -> 'EventEmissionData':
        require_record(raw)
        return cls(
            energy_kwh=get_field(raw, 'energy_kwh'),
            waste_kg=get_field(raw, 'waste_kg'),
            num_participants=get_field(raw, 'num_participants'),
            catering_meals=get_field(raw, 'catering_meals'),
            total_co2=get_field(raw, 'total_co2'),
        )


@dataclass
class EventEmissionBreakdown:
    energy: Decimal
    travel: Decimal
    catering: Decimal
    waste: Decimal

    def to_dict(self) -> Dict[str, float]:
        return {
            'energy': float(self.energy),
            'travel': float(self.travel),
            'catering': float(self.catering),
            'waste': float(self.waste),
        }


@dataclass
class Co2ComputationResult:
    total_co2: Decimal
    recomputed_total_co2: Decimal
    total_source: str
    breakdown: EventEmissionBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalCo2': float(self.total_co2),
            'recomputedTotalCo2': float(self.recomputed_total_co2),
            'totalSource': self.total_source,
            'breakdown': self.breakdown.to_dict(),
        }


class Co2CalculationService:
    def breakdown(self, data: EventEmissionData) -> EventEmissionBreakdown:
        power = calculate_power_emissions([{
            'source': PowerSource.GRID_ELECTRICITY,
            'totalKwh': data.energy_kwh,
        }])
        waste = calculate_waste_emissions([{
            'wasteType': WasteType.MIXED,
            'disposalMethod': DisposalMethod.RECYCLING,
            'quantityG': check_number(data.waste_kg, 'waste_kg') * GRAMS_PER_KG,
        }])
        transport = estimate_transport_emissions(data.num_participants)
        catering = estimate_catering_emissions(data.catering_meals)
        return EventEmissionBreakdown(
            energy=power.total_kg_co2e,
            travel=transport.total_kg_co2e,
            catering=catering.total_kg_co2e,
            waste=waste.total_kg_co2e,
        )

    def calculate(self, data: Any, stored_total: Optional[Any] = None) -> Co2ComputationResult:
        """
        Compute the combined event breakdown

        Args:
            data: EventEmissionData or a mapping with energyKwh, wasteKg,
                numParticipants, cateringMeals and optionally totalCo2
            stored_total: Already-known grand total; overrides data.total_co2

        Returns:
            Co2ComputationResult: authoritative total, recomputed total and the
            per-domain breakdown
        """
        if not isinstance(data, EventEmissionData):
            data = EventEmissionData.from_value(data)
        breakdown = self.breakdown(data)
        recomputed = total([breakdown.energy, breakdown.travel, breakdown.catering, breakdown.waste])

        known_total = stored_total if stored_total is not None else data.total_co2
        if known_total is not None:
            return Co2ComputationResult(
                total_co2=check_number(known_total, 'total_co2'),
                recomputed_total_co2=recomputed,
                total_source=TOTAL_SOURCE_STORED,
                breakdown=breakdown,
            )
        return Co2ComputationResult(
            total_co2=recomputed,
            recomputed_total_co2=recomputed,
            total_source=TOTAL_SOURCE_RECOMPUTED,
            breakdown=breakdown,
        )


co2_calculation_service = Co2CalculationService()
