"""
Waste Emission Calculator
Calculates CO2e from event waste with the DESNZ/DEFRA 2024 waste disposal
factors (kg CO2e per tonne). Quantities are accepted in grams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Sequence

from eventcarbon.utils.aggregation import group_sum, round3, total
from eventcarbon.utils.factors import (
    GRAMS_PER_TONNE,
    WASTE_FACTOR_YEAR,
    WASTE_FACTORS,
    WASTE_SOURCE_CITATION,
    DisposalMethod,
    WasteType,
    require_complete,
)
from eventcarbon.utils.insights import generate_waste_insights
from eventcarbon.utils.validation import (
    get_field,
    parse_enum,
    require_entries,
    require_number,
    require_record,
)


@dataclass
class WasteItem:
    waste_type: WasteType
    disposal_method: DisposalMethod
    quantity_g: Decimal

    @classmethod
    def from_value(cls, raw: Any, index: int) -> 'WasteItem':
        require_record(raw, index)
        return cls(
            waste_type=parse_enum(WasteType, get_field(raw, 'waste_type'), 'waste_type', index,
                                  'wasteType'),
            disposal_method=parse_enum(DisposalMethod, get_field(raw, 'disposal_method'),
                                       'disposal_method', index, 'disposalMethod'),
            quantity_g=require_number(raw, 'quantity_g', index),
        )


@dataclass
class WasteLineItem:
    waste_type: WasteType
    disposal_method: DisposalMethod
    tonnes: Decimal
    emission_factor: Decimal
    kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'wasteType': self.waste_type.value,
            'disposalMethod': self.disposal_method.value,
            'tonnes': float(self.tonnes),
            'emissionFactor': float(self.emission_factor),
            'kgCO2e': float(self.kg_co2e),
        }


@dataclass
class WasteTypeBreakdown:
    waste_type: WasteType
    total_tonnes: Decimal
    total_kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'wasteType': self.waste_type.value,
            'totalTonnes': float(self.total_tonnes),
            'totalKgCO2e': float(self.total_kg_co2e),
        }


@dataclass
class DisposalMethodBreakdown:
    disposal_method: DisposalMethod
    total_tonnes: Decimal
    total_kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'disposalMethod': self.disposal_method.value,
            'totalTonnes': float(self.total_tonnes),
            'totalKgCO2e': float(self.total_kg_co2e),
        }


@dataclass
class WasteEmissionResult:
    total_kg_co2e: Decimal
    total_tonnes: Decimal
    by_waste_type: List[WasteTypeBreakdown]
    by_disposal_method: List[DisposalMethodBreakdown]
    line_items: List[WasteLineItem]
    source: str
    factor_year: int
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'totalTonnes': float(self.total_tonnes),
            'byWasteType': [entry.to_dict() for entry in self.by_waste_type],
            'byDisposalMethod': [entry.to_dict() for entry in self.by_disposal_method],
            'lineItems': [item.to_dict() for item in self.line_items],
            'source': self.source,
            'factorYear': self.factor_year,
            'notes': list(self.notes),
        }


class WasteCalculator:
    """Prices waste items against a waste type x disposal method matrix."""

    def __init__(self, factors: Mapping[WasteType, Mapping] = WASTE_FACTORS):
        require_complete(factors, WasteType, 'waste factors')
        for waste_type in WasteType:
            require_complete(factors[waste_type], DisposalMethod, f'{waste_type.value} factors')
        self.factors = factors

    def calculate(self, items: Sequence[Any]) -> WasteEmissionResult:
        """
        Calculate CO2e emissions from a list of waste items

        Args:
            items: Waste entries with wasteType, disposalMethod and quantityG

        Returns:
            WasteEmissionResult: total with breakdowns by type and by method
        """
        raw_items = require_entries(items, 'items')
        parsed = [WasteItem.from_value(raw, i) for i, raw in enumerate(raw_items)]

        line_items = []
        for item in parsed:
            tonnes = item.quantity_g / GRAMS_PER_TONNE
            factor = self.factors[item.waste_type][item.disposal_method].value
            line_items.append(WasteLineItem(
                waste_type=item.waste_type,
                disposal_method=item.disposal_method,
                tonnes=tonnes,
                emission_factor=factor,
                kg_co2e=round3(tonnes * factor),
            ))

        def kg(item):
            return item.kg_co2e

        def tonnes_of(item):
            return item.tonnes

        kg_by_type = group_sum(line_items, lambda item: item.waste_type, kg)
        t_by_type = group_sum(line_items, lambda item: item.waste_type, tonnes_of)
        kg_by_method = group_sum(line_items, lambda item: item.disposal_method, kg)
        t_by_method = group_sum(line_items, lambda item: item.disposal_method, tonnes_of)

        by_waste_type = [
            WasteTypeBreakdown(waste_type, t_by_type[waste_type], value)
            for waste_type, value in kg_by_type.items()
        ]
        by_disposal_method = [
            DisposalMethodBreakdown(method, t_by_method[method], value)
            for method, value in kg_by_method.items()
        ]

        return WasteEmissionResult(
            total_kg_co2e=total(item.kg_co2e for item in line_items),
            total_tonnes=total(item.tonnes for item in line_items),
            by_waste_type=by_waste_type,
            by_disposal_method=by_disposal_method,
            line_items=line_items,
            source=WASTE_SOURCE_CITATION,
            factor_year=WASTE_FACTOR_YEAR,
            notes=generate_waste_insights(line_items, by_waste_type, self.factors),
        )


_default_calculator = WasteCalculator()


def calculate_waste_emissions(items: Sequence[Any]) -> WasteEmissionResult:
    return _default_calculator.calculate(items)
