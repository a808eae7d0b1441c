"""
Power Emission Calculator (on-site events)
Calculates CO2e from event power consumption across grid electricity, diesel
generators, solar and natural gas.

Each entry states its energy one of three ways, checked in this order:
    (a) totalKwh                          - exact consumption (meter/invoice)
    (b) durationHours + loadKw            - duration and equipment load
    (c) durationHours + participantCount  - load estimated from headcount
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from eventcarbon.utils.aggregation import ZERO, group_sum, round3, total
from eventcarbon.utils.errors import UnderSpecifiedError
from eventcarbon.utils.factors import (
    LOAD_BENCHMARKS,
    POWER_FACTOR_YEAR,
    POWER_FACTORS,
    POWER_SOURCE_CITATION,
    EmissionFactor,
    LoadBenchmark,
    PowerSource,
    require_complete,
)
from eventcarbon.utils.insights import generate_power_insights
from eventcarbon.utils.validation import (
    get_field,
    optional_number,
    parse_enum,
    require_entries,
    require_record,
)

PROVENANCE_GIVEN = 'given'
PROVENANCE_LOAD = 'load'
PROVENANCE_HEADCOUNT = 'headcount'


@dataclass
class PowerEntry:
    """A single power source entry for the event.

    Multiple entries with the same source are allowed (e.g. two generator runs).
    """

    source: PowerSource
    total_kwh: Optional[Decimal] = None
    duration_hours: Optional[Decimal] = None
    load_kw: Optional[Decimal] = None
    participant_count: Optional[Decimal] = None

    @classmethod
    def from_value(cls, raw: Any, index: int) -> 'PowerEntry':
        require_record(raw, index)
        return cls(
            source=parse_enum(PowerSource, get_field(raw, 'source'), 'source', index,
                              'power source'),
            total_kwh=optional_number(raw, 'total_kwh', index),
            duration_hours=optional_number(raw, 'duration_hours', index),
            load_kw=optional_number(raw, 'load_kw', index),
            participant_count=optional_number(raw, 'participant_count', index, allow_zero=False),
        )


# ---------------------------------------------------------------------------
# Energy specification variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExactEnergy:
    kwh: Decimal


@dataclass(frozen=True)
class FromLoad:
    hours: Decimal
    kw: Decimal


@dataclass(frozen=True)
class FromHeadcount:
    hours: Decimal
    participants: Decimal


EnergySpec = Union[ExactEnergy, FromLoad, FromHeadcount]


@dataclass(frozen=True)
class ResolvedEnergy:
    kwh: Decimal
    provenance: str
    estimated_load_kw: Optional[Decimal] = None
    benchmark: Optional[LoadBenchmark] = None


def select_energy_spec(entry: PowerEntry, index: int) -> EnergySpec:
    """Pick the first fully specified way of stating the entry's energy."""
    if entry.total_kwh is not None:
        return ExactEnergy(entry.total_kwh)
    if entry.duration_hours is not None:
        if entry.load_kw is not None:
            return FromLoad(entry.duration_hours, entry.load_kw)
        if entry.participant_count is not None:
            return FromHeadcount(entry.duration_hours, entry.participant_count)
    raise UnderSpecifiedError(
        'provide totalKwh, or durationHours with either loadKw or participantCount',
        index=index, field='source', value=entry.source.value,
    )


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

@dataclass
class PowerLineItem:
    index: int
    source: PowerSource
    kwh: Decimal
    kg_co2e: Decimal
    provenance: str
    estimated_load_kw: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'index': self.index,
            'source': self.source.value,
            'kwh': float(self.kwh),
            'kgCO2e': float(self.kg_co2e),
            'provenance': self.provenance,
        }
        if self.estimated_load_kw is not None:
            data['estimatedLoadKw'] = float(self.estimated_load_kw)
        return data


@dataclass
class PowerSourceBreakdown:
    source: PowerSource
    total_kwh: Decimal
    total_kg_co2e: Decimal
    emission_factor: Decimal
    scope: str
    estimated_load_kw: Optional[Decimal] = None
    benchmark: Optional[LoadBenchmark] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'source': self.source.value,
            'totalKwh': float(self.total_kwh),
            'totalKgCO2e': float(self.total_kg_co2e),
            'emissionFactor': float(self.emission_factor),
            'scope': self.scope,
        }
        if self.estimated_load_kw is not None:
            data['estimatedLoadKw'] = float(self.estimated_load_kw)
        return data


@dataclass
class PowerEmissionResult:
    total_kg_co2e: Decimal
    total_kwh: Decimal
    by_source: List[PowerSourceBreakdown]
    line_items: List[PowerLineItem]
    source: str
    factor_year: int
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'totalKwh': float(self.total_kwh),
            'bySource': [entry.to_dict() for entry in self.by_source],
            'lineItems': [item.to_dict() for item in self.line_items],
            'source': self.source,
            'factorYear': self.factor_year,
            'notes': list(self.notes),
        }


class PowerCalculator:
    """Prices power entries against a factor table and a load benchmark table."""

    def __init__(self, factors: Mapping[PowerSource, EmissionFactor] = POWER_FACTORS,
                 load_benchmarks: Sequence[LoadBenchmark] = LOAD_BENCHMARKS):
        require_complete(factors, PowerSource, 'power factors')
        if not load_benchmarks:
            raise ValueError('load_benchmarks must not be empty')
        self.factors = factors
        self.load_benchmarks = tuple(load_benchmarks)

    def estimate_load_kw(self, participant_count: Decimal) -> Tuple[Decimal, LoadBenchmark]:
        """Returns the estimated load in kW and the benchmark bracket used."""
        bracket = next(
            (b for b in self.load_benchmarks if participant_count <= b.max_participants),
            self.load_benchmarks[-1],
        )
        return participant_count * bracket.watts_per_person / 1000, bracket

    def resolve(self, spec: EnergySpec) -> ResolvedEnergy:
        if isinstance(spec, ExactEnergy):
            return ResolvedEnergy(spec.kwh, PROVENANCE_GIVEN)
        if isinstance(spec, FromLoad):
            return ResolvedEnergy(spec.hours * spec.kw, PROVENANCE_LOAD)
        if isinstance(spec, FromHeadcount):
            load_kw, bracket = self.estimate_load_kw(spec.participants)
            return ResolvedEnergy(spec.hours * load_kw, PROVENANCE_HEADCOUNT, load_kw, bracket)
        raise TypeError(f'Unsupported energy specification: {spec!r}')

    def calculate(self, entries: Sequence[Any]) -> PowerEmissionResult:
        """
        Calculate CO2e emissions from event power consumption

        Args:
            entries: Power entries (PowerEntry objects or mappings with
                source, totalKwh, durationHours, loadKw, participantCount)

        Returns:
            PowerEmissionResult: totals, per-source breakdown and notes
        """
        raw_entries = require_entries(entries, 'entries')
        parsed = [PowerEntry.from_value(raw, i) for i, raw in enumerate(raw_entries)]
        specs = [select_energy_spec(entry, i) for i, entry in enumerate(parsed)]

        line_items: List[PowerLineItem] = []
        estimates: Dict[PowerSource, ResolvedEnergy] = {}
        for i, (entry, spec) in enumerate(zip(parsed, specs)):
            resolved = self.resolve(spec)
            factor = self.factors[entry.source]
            line_items.append(PowerLineItem(
                index=i,
                source=entry.source,
                kwh=round3(resolved.kwh),
                kg_co2e=round3(resolved.kwh * factor.value),
                provenance=resolved.provenance,
                estimated_load_kw=(
                    round3(resolved.estimated_load_kw)
                    if resolved.estimated_load_kw is not None else None
                ),
            ))
            if resolved.provenance == PROVENANCE_HEADCOUNT:
                # Last estimate seen for a source is the one reported.
                estimates[entry.source] = resolved

        kwh_by_source = group_sum(line_items, lambda item: item.source, lambda item: item.kwh)
        kg_by_source = group_sum(line_items, lambda item: item.source, lambda item: item.kg_co2e)

        by_source = []
        for source, kwh in kwh_by_source.items():
            factor = self.factors[source]
            estimate = estimates.get(source)
            by_source.append(PowerSourceBreakdown(
                source=source,
                total_kwh=kwh,
                total_kg_co2e=kg_by_source.get(source, ZERO),
                emission_factor=factor.value,
                scope=factor.scope.value,
                estimated_load_kw=round3(estimate.estimated_load_kw) if estimate else None,
                benchmark=estimate.benchmark if estimate else None,
            ))

        return PowerEmissionResult(
            total_kg_co2e=total(entry.total_kg_co2e for entry in by_source),
            total_kwh=total(entry.total_kwh for entry in by_source),
            by_source=by_source,
            line_items=line_items,
            source=POWER_SOURCE_CITATION,
            factor_year=POWER_FACTOR_YEAR,
            notes=generate_power_insights(by_source, self.factors),
        )


_default_calculator = PowerCalculator()


def calculate_power_emissions(entries: Sequence[Any]) -> PowerEmissionResult:
    """Calculate power emissions with the default factor and benchmark tables."""
    return _default_calculator.calculate(entries)


def estimate_load_kw(participant_count) -> Tuple[Decimal, LoadBenchmark]:
    return _default_calculator.estimate_load_kw(Decimal(str(participant_count)))
