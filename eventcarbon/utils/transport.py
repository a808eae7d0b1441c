"""
Transport Emission Calculator
Provides two calculators:
    calculate_transport_emissions()  - individual journeys with known modes
    estimate_transport_emissions()   - participant count only, via a distance
                                       distribution chosen by event preset

Factors are kg CO2e per passenger-km (DESNZ/DEFRA 2024, section 5). Distances
are one-way; car factors assume a sole occupant.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eventcarbon.utils.aggregation import ZERO, group_sum, round3, total
from eventcarbon.utils.errors import DistributionError, RangeError
from eventcarbon.utils.factors import (
    LONG_HAUL_FLIGHT_FACTOR,
    LONG_HAUL_THRESHOLD_KM,
    PRESET_DISTRIBUTIONS,
    PRESET_THRESHOLDS,
    PROBABILITY_TOLERANCE,
    TRANSPORT_FACTOR_YEAR,
    TRANSPORT_FACTORS,
    TRANSPORT_SOURCE_CITATION,
    DistanceBand,
    EmissionFactor,
    EventPreset,
    TransportMode,
    require_complete,
)
from eventcarbon.utils.insights import generate_transport_insights
from eventcarbon.utils.validation import (
    check_number,
    get_field,
    parse_enum,
    require_entries,
    require_number,
    require_positive_int,
    require_record,
)

PRESET_SOURCE_INFERRED = 'inferred'
PRESET_SOURCE_EXPLICIT = 'explicit'
DISTRIBUTION_PRESET = 'preset'
DISTRIBUTION_CUSTOM = 'custom'


@dataclass
class ParticipantJourney:
    """A single participant's one-way journey to the event."""

    distance_km: Decimal
    mode: TransportMode

    @classmethod
    def from_value(cls, raw: Any, index: int) -> 'ParticipantJourney':
        require_record(raw, index)
        return cls(
            distance_km=require_number(raw, 'distance_km', index),
            mode=parse_enum(TransportMode, get_field(raw, 'mode'), 'mode', index,
                            'transport mode'),
        )


def parse_band(raw: Any, index: int) -> DistanceBand:
    """Validate one custom distance band. A missing ``maxKm`` means open-ended."""
    require_record(raw, index)
    min_km = require_number(raw, 'min_km', index)
    max_raw = get_field(raw, 'max_km')
    if max_raw is None or (isinstance(max_raw, float) and math.isinf(max_raw) and max_raw > 0):
        max_km = math.inf
    else:
        max_km = float(check_number(max_raw, 'max_km', index))
    if max_km <= float(min_km):
        raise RangeError(f'maxKm must be greater than minKm, got {max_raw}',
                         index=index, field='max_km', value=max_raw)
    probability = require_number(raw, 'probability', index)
    if probability > 1:
        raise RangeError(f'probability must be <= 1, got {probability}',
                         index=index, field='probability', value=get_field(raw, 'probability'))
    return DistanceBand(
        min_km=float(min_km),
        max_km=max_km,
        probability=probability,
        representative_km=require_number(raw, 'representative_km', index),
        mode=parse_enum(TransportMode, get_field(raw, 'mode'), 'mode', index, 'transport mode'),
    )


def validate_distribution(bands: Sequence[DistanceBand]) -> None:
    band_total = total(band.probability for band in bands)
    if abs(band_total - 1) > PROBABILITY_TOLERANCE:
        raise DistributionError(
            f'distance band probabilities must sum to 1.0, got {band_total:.4f}',
            field='probability', value=float(band_total),
        )


def infer_event_preset(participant_count: int) -> EventPreset:
    """< 200 local | < 5000 regional | < 10000 national | otherwise international"""
    for upper, preset in PRESET_THRESHOLDS:
        if participant_count < upper:
            return preset
    return EventPreset.INTERNATIONAL


@dataclass
class ModeBreakdown:
    mode: TransportMode
    passenger_km: Decimal
    total_kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode.value,
            'passengerKm': float(self.passenger_km),
            'totalKgCO2e': float(self.total_kg_co2e),
        }


@dataclass
class BandAssumption:
    band: str
    probability: Decimal
    representative_km: Decimal
    mode: TransportMode
    emission_factor: Decimal
    participants_estimated: Decimal
    kg_co2e: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'band': self.band,
            'probability': float(self.probability),
            'representativeKm': float(self.representative_km),
            'mode': self.mode.value,
            'emissionFactor': float(self.emission_factor),
            'participantsEstimated': float(self.participants_estimated),
            'kgCO2e': float(self.kg_co2e),
        }


@dataclass
class TransportEmissionResult:
    total_kg_co2e: Decimal
    total_passenger_km: Decimal
    by_mode: List[ModeBreakdown]
    source: str
    factor_year: int
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalKgCO2e': float(self.total_kg_co2e),
            'totalPassengerKm': float(self.total_passenger_km),
            'byMode': [entry.to_dict() for entry in self.by_mode],
            'source': self.source,
            'factorYear': self.factor_year,
            'notes': list(self.notes),
        }


@dataclass
class EstimatedTransportEmissionResult(TransportEmissionResult):
    participant_count: int = 0
    inferred_preset: Optional[EventPreset] = None
    active_preset: Optional[EventPreset] = None
    preset_source: str = PRESET_SOURCE_INFERRED
    distribution_source: str = DISTRIBUTION_PRESET
    assumptions: List[BandAssumption] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'participantCount': self.participant_count,
            'inferredPreset': self.inferred_preset.value,
            'activePreset': self.active_preset.value,
            'presetSource': self.preset_source,
            'distributionSource': self.distribution_source,
            'assumptions': [a.to_dict() for a in self.assumptions],
        })
        return data


class TransportCalculator:
    """Journey and distribution pricing against injectable factor tables."""

    def __init__(self, factors: Mapping[TransportMode, EmissionFactor] = TRANSPORT_FACTORS,
                 long_haul_factor: EmissionFactor = LONG_HAUL_FLIGHT_FACTOR,
                 long_haul_threshold_km: Decimal = LONG_HAUL_THRESHOLD_KM,
                 presets: Mapping[EventPreset, Tuple[DistanceBand, ...]] = PRESET_DISTRIBUTIONS):
        require_complete(factors, TransportMode, 'transport factors')
        require_complete(presets, EventPreset, 'preset distributions')
        self.factors = factors
        self.long_haul_factor = long_haul_factor
        self.long_haul_threshold_km = long_haul_threshold_km
        self.presets = presets

    def factor_for(self, mode: TransportMode, distance_km: Decimal) -> Decimal:
        if mode == TransportMode.FLIGHT and distance_km >= self.long_haul_threshold_km:
            return self.long_haul_factor.value
        return self.factors[mode].value

    def calculate(self, journeys: Sequence[Any]) -> TransportEmissionResult:
        """
        Calculate transport emissions from individual participant journeys

        Args:
            journeys: Journeys with distanceKm (one-way) and mode

        Returns:
            TransportEmissionResult: total and per-mode breakdown
        """
        raw_journeys = require_entries(journeys, 'journeys')
        parsed = [ParticipantJourney.from_value(raw, i) for i, raw in enumerate(raw_journeys)]

        priced = [
            (j.mode, j.distance_km, round3(j.distance_km * self.factor_for(j.mode, j.distance_km)))
            for j in parsed
        ]
        by_mode = _mode_breakdown(priced)

        return TransportEmissionResult(
            total_kg_co2e=total(entry.total_kg_co2e for entry in by_mode),
            total_passenger_km=total(entry.passenger_km for entry in by_mode),
            by_mode=by_mode,
            source=TRANSPORT_SOURCE_CITATION,
            factor_year=TRANSPORT_FACTOR_YEAR,
            notes=generate_transport_insights(by_mode),
        )

    def estimate(self, participant_count: Any, preset: Any = None,
                 custom_distribution: Optional[Sequence[Any]] = None
                 ) -> EstimatedTransportEmissionResult:
        """
        Estimate transport emissions from participant count alone

        Args:
            participant_count: Total number of attendees (positive integer)
            preset: Override the preset inferred from participant_count
            custom_distribution: Custom distance bands; replaces the preset bands

        Returns:
            EstimatedTransportEmissionResult: totals, per-mode breakdown and the
            per-band assumptions used
        """
        count = require_positive_int(participant_count, 'participant_count')
        inferred = infer_event_preset(count)
        if preset is not None:
            active = parse_enum(EventPreset, preset, 'preset', label='event preset')
            preset_source = PRESET_SOURCE_EXPLICIT
        else:
            active = inferred
            preset_source = PRESET_SOURCE_INFERRED

        if custom_distribution is not None:
            raw_bands = require_entries(custom_distribution, 'customDistribution')
            bands = [parse_band(raw, i) for i, raw in enumerate(raw_bands)]
            distribution_source = DISTRIBUTION_CUSTOM
        else:
            bands = list(self.presets[active])
            distribution_source = DISTRIBUTION_PRESET
        validate_distribution(bands)

        priced = []
        assumptions = []
        for band in bands:
            participants = count * band.probability
            factor = self.factor_for(band.mode, band.representative_km)
            kg = round3(participants * band.representative_km * factor)
            priced.append((band.mode, participants * band.representative_km, kg))
            assumptions.append(BandAssumption(
                band=band.label,
                probability=band.probability,
                representative_km=band.representative_km,
                mode=band.mode,
                emission_factor=factor,
                participants_estimated=round3(participants),
                kg_co2e=kg,
            ))
        by_mode = _mode_breakdown(priced)

        return EstimatedTransportEmissionResult(
            total_kg_co2e=total(entry.total_kg_co2e for entry in by_mode),
            total_passenger_km=total(entry.passenger_km for entry in by_mode),
            by_mode=by_mode,
            source=TRANSPORT_SOURCE_CITATION,
            factor_year=TRANSPORT_FACTOR_YEAR,
            notes=generate_transport_insights(by_mode, estimated=True),
            participant_count=count,
            inferred_preset=inferred,
            active_preset=active,
            preset_source=preset_source,
            distribution_source=distribution_source,
            assumptions=assumptions,
        )


def _mode_breakdown(priced: Sequence[Tuple[TransportMode, Decimal, Decimal]]) -> List[ModeBreakdown]:
    km_by_mode = group_sum(priced, lambda p: p[0], lambda p: round3(p[1]))
    kg_by_mode = group_sum(priced, lambda p: p[0], lambda p: p[2])
    return [
        ModeBreakdown(mode, km, kg_by_mode.get(mode, ZERO))
        for mode, km in km_by_mode.items()
    ]


_default_calculator = TransportCalculator()


def calculate_transport_emissions(journeys: Sequence[Any]) -> TransportEmissionResult:
    return _default_calculator.calculate(journeys)


def estimate_transport_emissions(participant_count: Any, preset: Any = None,
                                 custom_distribution: Optional[Sequence[Any]] = None
                                 ) -> EstimatedTransportEmissionResult:
    return _default_calculator.estimate(participant_count, preset, custom_distribution)
