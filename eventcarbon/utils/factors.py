"""
Emission Factor Registry
Closed category enumerations and the read-only factor, benchmark and
distribution tables used by every calculator.

Tables are built once at import time and exposed through MappingProxyType so
they cannot be modified after start-up. Calculators take them as constructor
arguments, which lets tests substitute their own tables.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class Scope(str, Enum):
    """GHG Protocol scope classification."""

    SCOPE_1 = 'scope_1'  # direct combustion
    SCOPE_2 = 'scope_2'  # purchased energy
    SCOPE_3 = 'scope_3'  # value chain / downstream
    ZERO = 'zero'


@dataclass(frozen=True)
class EmissionFactor:
    value: Decimal
    scope: Scope
    reference: str
    label: str = ''

    def to_dict(self):
        data = {
            'factorValue': float(self.value),
            'scope': self.scope.value,
            'reference': self.reference,
        }
        if self.label:
            data['label'] = self.label
        return data


def _d(value: str) -> Decimal:
    return Decimal(value)


# ---------------------------------------------------------------------------
# Power (kg CO2e per kWh)
# ---------------------------------------------------------------------------

class PowerSource(str, Enum):
    GRID_ELECTRICITY = 'grid_electricity'
    DIESEL_GENERATOR = 'diesel_generator'
    SOLAR = 'solar'
    NATURAL_GAS = 'natural_gas'


POWER_FACTORS: Mapping[PowerSource, EmissionFactor] = MappingProxyType({
    PowerSource.GRID_ELECTRICITY: EmissionFactor(
        _d('0.431'), Scope.SCOPE_2,
        'IEA Emissions Factors 2023 - Nigeria grid mix (CO2 per kWh, electricity generation)',
    ),
    PowerSource.DIESEL_GENERATOR: EmissionFactor(
        _d('0.700'), Scope.SCOPE_1,
        'IPCC 2006 Guidelines Vol.2 (diesel combustion) + small generator inefficiency adjustment. '
        'Reflects typical 1-50 kW generator performance in Nigerian context '
        '(~2x utility-scale emissions per kWh).',
    ),
    PowerSource.SOLAR: EmissionFactor(
        _d('0.0'), Scope.ZERO,
        'Operational emissions only. Embodied carbon from panel manufacture '
        '(~40-50 g CO2e/kWh lifecycle) is attributed to the manufacturer.',
    ),
    PowerSource.NATURAL_GAS: EmissionFactor(
        _d('0.202'), Scope.SCOPE_1,
        'IPCC 2006 Guidelines Vol.2 / DEFRA 2024 fuel combustion factors for natural gas '
        '(direct combustion, thermal output basis).',
    ),
})

POWER_FACTOR_YEAR = 2023
POWER_SOURCE_CITATION = (
    'IEA Emissions Factors 2023 (Nigeria grid); IPCC 2006 Vol.2 (diesel, natural gas); '
    'GHG Protocol Scope 1 & 2 methodology; '
    'CIBSE Guide F / Carbon Trust event benchmarks (participant load estimation)'
)


@dataclass(frozen=True)
class LoadBenchmark:
    """Venue load per attendee for events up to ``max_participants`` people."""

    max_participants: float
    watts_per_person: Decimal
    label: str


# Whole-venue load (lighting, AV/PA, HVAC, catering equipment) per attendee.
# CIBSE Guide F, ASHRAE 90.1, Carbon Trust event sector benchmarks.
LOAD_BENCHMARKS: Tuple[LoadBenchmark, ...] = (
    LoadBenchmark(49, _d('60'), 'intimate (<50)'),
    LoadBenchmark(199, _d('50'), 'small (50-199)'),
    LoadBenchmark(999, _d('40'), 'medium (200-999)'),
    LoadBenchmark(4999, _d('30'), 'large (1000-4999)'),
    LoadBenchmark(math.inf, _d('25'), 'mega (5000+)'),
)


# ---------------------------------------------------------------------------
# Virtual / streaming power
# ---------------------------------------------------------------------------

class VideoQuality(str, Enum):
    AUDIO_ONLY = 'audio_only'
    LOW_SD = 'low_sd'
    SD = 'sd'
    HD = 'hd'
    FULL_HD = 'full_hd'


class DeviceType(str, Enum):
    LAPTOP = 'laptop'
    DESKTOP = 'desktop'
    SMARTPHONE = 'smartphone'
    TABLET = 'tablet'
    SMART_TV = 'smart_tv'
    CONFERENCE_ROOM = 'conference_room'


class NetworkType(str, Enum):
    FIXED = 'fixed'
    MOBILE_4G = 'mobile_4g'
    MOBILE_5G = 'mobile_5g'


# Zoom/Teams/WebRTC published encoder defaults
BITRATE_KBPS: Mapping[VideoQuality, Decimal] = MappingProxyType({
    VideoQuality.AUDIO_ONLY: _d('64'),
    VideoQuality.LOW_SD: _d('500'),
    VideoQuality.SD: _d('1500'),
    VideoQuality.HD: _d('3000'),
    VideoQuality.FULL_HD: _d('6000'),
})

# Average draw during video conferencing (EPRI 2021; Malmodin & Lunden 2018)
DEVICE_WATTS: Mapping[DeviceType, Decimal] = MappingProxyType({
    DeviceType.LAPTOP: _d('30'),
    DeviceType.DESKTOP: _d('100'),
    DeviceType.SMARTPHONE: _d('3'),
    DeviceType.TABLET: _d('7'),
    DeviceType.SMART_TV: _d('90'),
    DeviceType.CONFERENCE_ROOM: _d('200'),
})

# kWh per GB transmitted (Aslan et al. 2018; IEA 2020; IEA/Ericsson 2022)
NETWORK_KWH_PER_GB: Mapping[NetworkType, Decimal] = MappingProxyType({
    NetworkType.FIXED: _d('0.000072'),
    NetworkType.MOBILE_4G: _d('0.00088'),
    NetworkType.MOBILE_5G: _d('0.00023'),
})

# Hyperscale CDN/cloud, PUE ~1.2 (IEA 2020)
DATA_CENTRE_KWH_PER_GB = _d('0.00007')

GRID_FACTORS: Mapping[str, Decimal] = MappingProxyType({
    'nigeria': _d('0.431'),         # IEA 2023
    'global_average': _d('0.490'),  # IEA 2022
    'uk': _d('0.207'),              # DEFRA 2024
    'eu': _d('0.233'),              # EEA 2022
})

DEFAULT_PARTICIPANT_GRID = 'nigeria'
DEFAULT_DATA_CENTRE_GRID = 'global_average'

# Typical professional audience; counts are percentages scaled to the event.
DEFAULT_SEGMENT_PROFILE: Tuple[Tuple[int, DeviceType, NetworkType], ...] = (
    (60, DeviceType.LAPTOP, NetworkType.FIXED),
    (20, DeviceType.SMARTPHONE, NetworkType.MOBILE_4G),
    (15, DeviceType.DESKTOP, NetworkType.FIXED),
    (5, DeviceType.TABLET, NetworkType.FIXED),
)

VIRTUAL_POWER_CITATION = (
    'Aslan et al. (2018) J. Industrial Ecology (network intensity); '
    'IEA (2020) Data Centres and Data Transmission Networks (DC + mobile); '
    'Malmodin & Lunden (2018) Sustainability (device power); '
    'IEA Emissions Factors 2023 (Nigeria grid); IEA 2022 global average grid'
)
VIRTUAL_POWER_FACTOR_YEAR = 2023


# ---------------------------------------------------------------------------
# Catering (kg CO2e per serving)
# ---------------------------------------------------------------------------

class CateringCategory(str, Enum):
    MEAL = 'meal'
    BEVERAGE = 'beverage'
    SNACK = 'snack'


class MealType(str, Enum):
    VEGAN = 'vegan'
    VEGETARIAN = 'vegetarian'
    PESCATARIAN = 'pescatarian'
    LOW_MEAT = 'low_meat'
    MEDIUM_MEAT = 'medium_meat'
    HIGH_MEAT = 'high_meat'


class BeverageType(str, Enum):
    COFFEE_WITH_MILK = 'coffee_with_milk'
    COFFEE_BLACK = 'coffee_black'
    TEA = 'tea'
    JUICE = 'juice'
    WATER_BOTTLE = 'water_bottle'
    SOFT_DRINK = 'soft_drink'


class SnackType(str, Enum):
    FRUIT = 'fruit'
    PASTRY = 'pastry'
    BISCUITS = 'biscuits'
    SANDWICH = 'sandwich'
    BUFFET_MIXED = 'buffet_mixed'
    BUFFET_VEG = 'buffet_veg'


_SCARBOROUGH = 'Scarborough et al. 2023 (Nature Food), whole-day dietary GHG / 3 meals'


def _catering(value: str, label: str, reference: str) -> EmissionFactor:
    return EmissionFactor(_d(value), Scope.SCOPE_3, reference, label)


MEAL_FACTORS: Mapping[MealType, EmissionFactor] = MappingProxyType({
    MealType.VEGAN: _catering('0.96', 'Vegan', _SCARBOROUGH),
    MealType.VEGETARIAN: _catering('1.27', 'Vegetarian', _SCARBOROUGH),
    MealType.PESCATARIAN: _catering('1.30', 'Pescatarian/fish-eater', _SCARBOROUGH),
    MealType.LOW_MEAT: _catering('1.56', 'Low-meat (<50 g/day)', _SCARBOROUGH),
    MealType.MEDIUM_MEAT: _catering('1.88', 'Medium-meat (50-99 g/day)', _SCARBOROUGH),
    MealType.HIGH_MEAT: _catering('2.40', 'High-meat (>=100 g/day)', _SCARBOROUGH),
})

BEVERAGE_FACTORS: Mapping[BeverageType, EmissionFactor] = MappingProxyType({
    BeverageType.COFFEE_WITH_MILK: _catering(
        '0.28', 'Coffee with milk (latte/flat white/cappuccino)', 'Twomey et al. 2021'),
    BeverageType.COFFEE_BLACK: _catering(
        '0.04', 'Black coffee (espresso/Americano)', 'Twomey et al. 2021'),
    BeverageType.TEA: _catering(
        '0.013', 'Tea (with small milk splash)', 'Circular Ecology LCA 2022; WWF Sweden 2022'),
    BeverageType.JUICE: _catering(
        '0.10', 'Fruit juice (200 ml serving)', 'Poore & Nemecek 2018'),
    BeverageType.WATER_BOTTLE: _catering(
        '0.12', 'Bottled water (500 ml PET)', 'Ecoinvent / DEFRA material consumption factors'),
    BeverageType.SOFT_DRINK: _catering(
        '0.08', 'Soft drink (330 ml can)', 'Ecoinvent / DEFRA material consumption factors'),
})

SNACK_FACTORS: Mapping[SnackType, EmissionFactor] = MappingProxyType({
    SnackType.FRUIT: _catering('0.10', 'Fruit portion (~100 g)', 'Poore & Nemecek 2018'),
    SnackType.PASTRY: _catering(
        '0.25', 'Pastry (croissant/pain au chocolat)', 'Poore & Nemecek 2018'),
    SnackType.BISCUITS: _catering('0.20', 'Biscuits/cookies (2 pieces)', 'Poore & Nemecek 2018'),
    SnackType.SANDWICH: _catering(
        '1.10', 'Sandwich (mixed filling)', 'Carbon Trust event catering estimates'),
    SnackType.BUFFET_MIXED: _catering(
        '0.55', 'Mixed buffet portion (finger food)', 'Carbon Trust event catering estimates'),
    SnackType.BUFFET_VEG: _catering(
        '0.30', 'Vegetarian buffet portion', 'Carbon Trust event catering estimates'),
})

CATERING_FACTORS: Mapping[CateringCategory, Mapping] = MappingProxyType({
    CateringCategory.MEAL: MEAL_FACTORS,
    CateringCategory.BEVERAGE: BEVERAGE_FACTORS,
    CateringCategory.SNACK: SNACK_FACTORS,
})

CATERING_TYPES = MappingProxyType({
    CateringCategory.MEAL: MealType,
    CateringCategory.BEVERAGE: BeverageType,
    CateringCategory.SNACK: SnackType,
})

# Broad mixed-attendance corporate event; shares sum to 1.0.
DEFAULT_DIET_PROFILE: Tuple[Tuple[MealType, Decimal], ...] = (
    (MealType.HIGH_MEAT, _d('0.40')),
    (MealType.MEDIUM_MEAT, _d('0.25')),
    (MealType.LOW_MEAT, _d('0.15')),
    (MealType.VEGETARIAN, _d('0.15')),
    (MealType.VEGAN, _d('0.05')),
)

CATERING_FACTOR_YEAR = 2023
CATERING_SOURCE_CITATION = (
    'Scarborough et al. (2023) Nature Food (meals); '
    'Poore & Nemecek (2018) Science (ingredients); '
    'Circular Ecology / WWF Sweden (beverages); '
    'GHG Protocol Scope 3 Category 1'
)


# ---------------------------------------------------------------------------
# Transport (kg CO2e per passenger-km, DESNZ/DEFRA 2024 section 5)
# ---------------------------------------------------------------------------

class TransportMode(str, Enum):
    CAR_PETROL = 'car_petrol'
    CAR_ELECTRIC = 'car_electric'
    BUS = 'bus'
    TRAIN = 'train'
    FLIGHT = 'flight'


class EventPreset(str, Enum):
    LOCAL = 'local'
    REGIONAL = 'regional'
    NATIONAL = 'national'
    INTERNATIONAL = 'international'


_DEFRA_2024 = 'DESNZ/DEFRA 2024 Greenhouse Gas Conversion Factors, Section 5'

# Flight entry is the short-haul (< LONG_HAUL_THRESHOLD_KM) economy factor incl. RF.
TRANSPORT_FACTORS: Mapping[TransportMode, EmissionFactor] = MappingProxyType({
    TransportMode.CAR_PETROL: EmissionFactor(
        _d('0.1645'), Scope.SCOPE_3, _DEFRA_2024, 'Average petrol car, sole occupant'),
    TransportMode.CAR_ELECTRIC: EmissionFactor(
        _d('0.0436'), Scope.SCOPE_3, _DEFRA_2024, 'Average battery electric car, sole occupant'),
    TransportMode.BUS: EmissionFactor(
        _d('0.0272'), Scope.SCOPE_3, _DEFRA_2024, 'Average local bus'),
    TransportMode.TRAIN: EmissionFactor(
        _d('0.03546'), Scope.SCOPE_3, _DEFRA_2024, 'National Rail average'),
    TransportMode.FLIGHT: EmissionFactor(
        _d('0.1859'), Scope.SCOPE_3, _DEFRA_2024, 'Short-haul flight, economy + RF'),
})

LONG_HAUL_FLIGHT_FACTOR = EmissionFactor(
    _d('0.1511'), Scope.SCOPE_3, _DEFRA_2024, 'Long-haul flight, economy + RF')
LONG_HAUL_THRESHOLD_KM = _d('3700')

TRANSPORT_FACTOR_YEAR = 2024
TRANSPORT_SOURCE_CITATION = _DEFRA_2024


@dataclass(frozen=True)
class DistanceBand:
    """One band of a distance probability distribution.

    ``min_km`` is inclusive, ``max_km`` exclusive (``math.inf`` for the last
    band). ``representative_km`` is the distance priced for everyone in the
    band, travelling by ``mode``.
    """

    min_km: float
    max_km: float
    probability: Decimal
    representative_km: Decimal
    mode: TransportMode

    @property
    def label(self) -> str:
        if math.isinf(self.max_km):
            return f'>{_fmt_km(self.min_km)}km'
        return f'{_fmt_km(self.min_km)}-{_fmt_km(self.max_km)}km'


def _fmt_km(value: float) -> str:
    return f'{value:g}'


def _band(min_km, max_km, probability, representative_km, mode) -> DistanceBand:
    return DistanceBand(min_km, max_km, _d(probability), _d(representative_km), mode)


_CAR = TransportMode.CAR_PETROL
_TRAIN = TransportMode.TRAIN
_FLIGHT = TransportMode.FLIGHT

# Conference travel research (Kapoor et al. 2025; Nature Sustainability 2021),
# UK commute patterns and the DEFRA 400 km train/flight threshold.
PRESET_DISTRIBUTIONS: Mapping[EventPreset, Tuple[DistanceBand, ...]] = MappingProxyType({
    EventPreset.LOCAL: (
        _band(0, 10, '0.50', '5', _CAR),
        _band(10, 50, '0.30', '25', _CAR),
        _band(50, 200, '0.15', '100', _TRAIN),
        _band(200, 500, '0.04', '300', _TRAIN),
        _band(500, math.inf, '0.01', '800', _FLIGHT),
    ),
    EventPreset.REGIONAL: (
        _band(0, 10, '0.20', '5', _CAR),
        _band(10, 50, '0.35', '25', _CAR),
        _band(50, 200, '0.30', '100', _TRAIN),
        _band(200, 500, '0.12', '300', _TRAIN),
        _band(500, math.inf, '0.03', '1000', _FLIGHT),
    ),
    EventPreset.NATIONAL: (
        _band(0, 10, '0.10', '5', _CAR),
        _band(10, 50, '0.20', '25', _CAR),
        _band(50, 200, '0.30', '100', _TRAIN),
        _band(200, 500, '0.25', '350', _TRAIN),
        _band(500, math.inf, '0.15', '1500', _FLIGHT),
    ),
    EventPreset.INTERNATIONAL: (
        _band(0, 50, '0.05', '20', _CAR),
        _band(50, 200, '0.10', '100', _TRAIN),
        _band(200, 500, '0.15', '350', _TRAIN),
        _band(500, 3700, '0.35', '1500', _FLIGHT),
        _band(3700, math.inf, '0.35', '7000', _FLIGHT),
    ),
})

# (upper bound exclusive, preset); anything beyond the last bound is international
PRESET_THRESHOLDS: Tuple[Tuple[int, EventPreset], ...] = (
    (200, EventPreset.LOCAL),
    (5000, EventPreset.REGIONAL),
    (10000, EventPreset.NATIONAL),
)

PROBABILITY_TOLERANCE = _d('0.001')


# ---------------------------------------------------------------------------
# Waste (kg CO2e per tonne, DESNZ/DEFRA 2024 section 12)
# ---------------------------------------------------------------------------

class WasteType(str, Enum):
    FOOD = 'food'
    PAPER_CARDBOARD = 'paper_cardboard'
    PLASTIC = 'plastic'
    GLASS = 'glass'
    METAL = 'metal'
    MIXED = 'mixed'


class DisposalMethod(str, Enum):
    LANDFILL = 'landfill'
    INCINERATION = 'incineration'
    RECYCLING = 'recycling'
    COMPOSTING = 'composting'


_DEFRA_WASTE = 'DESNZ/DEFRA 2024 Greenhouse Gas Conversion Factors, Section 12'


def _waste_row(landfill: str, incineration: str, recycling: str,
               composting: str) -> Mapping[DisposalMethod, EmissionFactor]:
    values = {
        DisposalMethod.LANDFILL: landfill,
        DisposalMethod.INCINERATION: incineration,
        DisposalMethod.RECYCLING: recycling,
        DisposalMethod.COMPOSTING: composting,
    }
    return MappingProxyType({
        method: EmissionFactor(_d(value), Scope.SCOPE_3, _DEFRA_WASTE)
        for method, value in values.items()
    })


# Recycling and incineration carry the transport-to-facility factor only
# (21.3); processing is attributed to the processor. Non-compostable types
# use the same transport floor under composting.
WASTE_FACTORS: Mapping[WasteType, Mapping[DisposalMethod, EmissionFactor]] = MappingProxyType({
    WasteType.FOOD: _waste_row('578.0', '21.3', '0.0', '116.0'),
    WasteType.PAPER_CARDBOARD: _waste_row('1453.0', '21.3', '21.3', '116.0'),
    WasteType.PLASTIC: _waste_row('33.0', '21.3', '21.3', '21.3'),
    WasteType.GLASS: _waste_row('1.2', '21.3', '21.3', '21.3'),
    WasteType.METAL: _waste_row('1.2', '21.3', '21.3', '21.3'),
    WasteType.MIXED: _waste_row('467.0', '21.3', '21.3', '116.0'),
})

GRAMS_PER_TONNE = _d('1000000')
WASTE_FACTOR_YEAR = 2024
WASTE_SOURCE_CITATION = (
    'DESNZ/DEFRA 2024 Greenhouse Gas Conversion Factors for Company Reporting, Section 12'
)


def require_complete(table: Mapping, enum_cls, name: str) -> None:
    """Raise if a substitute table is missing any member of its enumeration."""
    missing = [member.value for member in enum_cls if member not in table]
    if missing:
        raise ValueError(f'{name} is missing entries for: {", ".join(missing)}')
