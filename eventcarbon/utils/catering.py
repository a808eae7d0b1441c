"""
Catering Emission Calculator
Estimates CO2e from event catering (meals, beverages and snacks) at the
per-serving level.

Two entry points:
    calculate_catering_emissions()  - itemized menu
    estimate_catering_emissions()   - serving count only, default diet mix

Factors cover farm-to-fork (GHG Protocol Scope 3 Category 1); on-site cooking
energy belongs in the power calculator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from eventcarbon.utils.aggregation import ZERO, group_sum, round3, total
from eventcarbon.utils.factors import (
    CATERING_FACTOR_YEAR,
    CATERING_FACTORS,
    CATERING_SOURCE_CITATION,
    CATERING_TYPES,
    DEFAULT_DIET_PROFILE,
    CateringCategory,
    MealType,
    require_complete,
)
from eventcarbon.utils.insights import generate_catering_insights
from eventcarbon.utils.validation import (
    check_number,
    get_field,
    parse_enum,
    require_entries,
    require_record,
)


@dataclass
class CateringItem:
    """A batch of one item type served at the event."""

    category: CateringCategory
    type: Enum
    servings: Decimal

    @classmethod
    def from_value(cls, raw: Any, index: int) -> 'CateringItem':
        require_record(raw, index)
        category = parse_enum(CateringCategory, get_field(raw, 'category'), 'category', index)
        type_cls = CATERING_TYPES[category]
        item_type = parse_enum(type_cls, get_field(raw, 'type'), 'type', index,
                               f'{category.value} type')
        servings = get_field(raw, 'servings')
        return cls(
            category=category,
            type=item_type,
            servings=check_number(servings, 'servings', index),
        )


@dataclass
class CateringItemBreakdown:
    category: CateringCategory
    type: Enum
    label: str
    servings: Decimal
    kg_co2e_per_serving: Decimal
    total_kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category': self.category.value,
            'type': self.type.value,
            'label': self.label,
            'servings': float(self.servings),
            'kgCO2ePerServing': float(self.kg_co2e_per_serving),
            'totalKgCO2e': float(self.total_kg_co2e),
        }


@dataclass
class CateringEmissionResult:
    total_kg_co2e: Decimal
    total_servings: Decimal
    by_item: List[CateringItemBreakdown]
    by_category: Dict[CateringCategory, Decimal]
    source: str
    factor_year: int
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'totalServings': float(self.total_servings),
            'byItem': [item.to_dict() for item in self.by_item],
            'byCategory': {
                'meals': float(self.by_category[CateringCategory.MEAL]),
                'beverages': float(self.by_category[CateringCategory.BEVERAGE]),
                'snacks': float(self.by_category[CateringCategory.SNACK]),
            },
            'source': self.source,
            'factorYear': self.factor_year,
            'notes': list(self.notes),
        }


@dataclass
class CateringEstimate:
    total_kg_co2e: Decimal
    kg_co2e_per_serving: Decimal
    servings: Decimal
    note: str
    source: str
    factor_year: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'kgCO2ePerServing': float(self.kg_co2e_per_serving),
            'servings': float(self.servings),
            'note': self.note,
            'source': self.source,
            'factorYear': self.factor_year,
        }


class CateringCalculator:
    """Itemized catering calculator and serving-count estimator."""

    def __init__(self, factors: Mapping[CateringCategory, Mapping] = CATERING_FACTORS,
                 diet_profile: Sequence[Tuple[MealType, Decimal]] = DEFAULT_DIET_PROFILE):
        require_complete(factors, CateringCategory, 'catering factors')
        for category, type_cls in CATERING_TYPES.items():
            require_complete(factors[category], type_cls, f'{category.value} factors')
        profile_total = total(share for _, share in diet_profile)
        if abs(profile_total - 1) > Decimal('0.001'):
            raise ValueError(f'diet profile shares must sum to 1.0, got {profile_total}')
        self.factors = factors
        self.diet_profile = tuple(diet_profile)

    def calculate(self, items: Sequence[Any]) -> CateringEmissionResult:
        """
        Calculate CO2e emissions from event catering

        Args:
            items: Catering items (category, type, servings)

        Returns:
            CateringEmissionResult: total, per-item and per-category breakdown
        """
        raw_items = require_entries(items, 'items')
        parsed = [CateringItem.from_value(raw, i) for i, raw in enumerate(raw_items)]

        by_item = []
        for item in parsed:
            factor = self.factors[item.category][item.type]
            by_item.append(CateringItemBreakdown(
                category=item.category,
                type=item.type,
                label=factor.label,
                servings=item.servings,
                kg_co2e_per_serving=factor.value,
                total_kg_co2e=round3(item.servings * factor.value),
            ))

        grouped = group_sum(by_item, lambda item: item.category, lambda item: item.total_kg_co2e)
        by_category = {category: grouped.get(category, ZERO) for category in CateringCategory}

        return CateringEmissionResult(
            total_kg_co2e=total(by_category.values()),
            total_servings=total(item.servings for item in by_item),
            by_item=by_item,
            by_category=by_category,
            source=CATERING_SOURCE_CITATION,
            factor_year=CATERING_FACTOR_YEAR,
            notes=generate_catering_insights(by_item, self.factors[CateringCategory.MEAL]),
        )

    def blended_meal_factor(self) -> Decimal:
        """Weighted average meal factor for the default diet profile."""
        meals = self.factors[CateringCategory.MEAL]
        return total(meals[meal_type].value * share for meal_type, share in self.diet_profile)

    def estimate(self, servings: Any) -> CateringEstimate:
        """
        Estimate catering emissions from a serving count alone

        Args:
            servings: Number of meal servings (must be > 0)

        Returns:
            CateringEstimate: total, blended per-serving factor and a note
        """
        count = check_number(servings, 'servings', allow_zero=False)
        per_serving = self.blended_meal_factor()
        profile = ', '.join(
            f'{share * 100:.0f}% {meal_type.value.replace("_", "-")}'
            for meal_type, share in self.diet_profile
        )
        return CateringEstimate(
            total_kg_co2e=round3(count * per_serving),
            kg_co2e_per_serving=round3(per_serving),
            servings=count,
            note=(
                f'Estimated using default diet profile: {profile}. '
                'Supply itemized menu data for higher accuracy.'
            ),
            source=CATERING_SOURCE_CITATION,
            factor_year=CATERING_FACTOR_YEAR,
        )


_default_calculator = CateringCalculator()


def calculate_catering_emissions(items: Sequence[Any]) -> CateringEmissionResult:
    return _default_calculator.calculate(items)


def estimate_catering_emissions(servings: Any) -> CateringEstimate:
    return _default_calculator.estimate(servings)
