"""
Insights Module - Rule-based notes for emission results
Each generator reads an already-aggregated breakdown and returns advisory
text. Notes never change the totals they describe.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Mapping, Sequence

from eventcarbon.utils.aggregation import share, total
from eventcarbon.utils.factors import (
    BITRATE_KBPS,
    LONG_HAUL_THRESHOLD_KM,
    MEAL_FACTORS,
    WASTE_FACTORS,
    BeverageType,
    CateringCategory,
    DisposalMethod,
    MealType,
    NetworkType,
    PowerSource,
    TransportMode,
    VideoQuality,
    WasteType,
)

PLANT_BASED = (MealType.VEGAN, MealType.VEGETARIAN)
MEAT_HEAVY = (MealType.MEDIUM_MEAT, MealType.HIGH_MEAT)


def generate_power_insights(by_source: Sequence, factors: Mapping) -> List[str]:
    """
    Generate notes for an on-site power breakdown

    Args:
        by_source: PowerSourceBreakdown entries, one per source
        factors: Power factor table the breakdown was priced with

    Returns:
        list: Note strings, provenance note last
    """
    notes = []
    sources = {entry.source: entry for entry in by_source}

    for entry in by_source:
        if entry.estimated_load_kw is not None and entry.benchmark is not None:
            notes.append(
                f'{entry.source.value}: load estimated at {entry.estimated_load_kw:.1f} kW '
                f'({entry.benchmark.label} event benchmark of '
                f'{entry.benchmark.watts_per_person} W/person). '
                'For higher accuracy, replace participantCount with a measured loadKw.'
            )

    diesel = sources.get(PowerSource.DIESEL_GENERATOR)
    grid = sources.get(PowerSource.GRID_ELECTRICITY)
    diesel_factor = factors[PowerSource.DIESEL_GENERATOR].value
    grid_factor = factors[PowerSource.GRID_ELECTRICITY].value

    if diesel and grid and diesel.total_kg_co2e > grid.total_kg_co2e:
        saving = share(diesel_factor - grid_factor, diesel_factor)
        notes.append(
            'Diesel generator is the dominant emission source. '
            'Replacing generator hours with grid electricity would reduce emissions '
            f'by approximately {saving:.0f}% per kWh '
            f'({diesel_factor} -> {grid_factor} kg CO2e/kWh).'
        )

    if diesel and not grid:
        notes.append(
            'Event is entirely generator-powered. This is the highest-emission scenario. '
            'Even partial grid or solar substitution would significantly reduce footprint.'
        )

    solar = sources.get(PowerSource.SOLAR)
    if solar:
        avoided = solar.total_kwh * diesel_factor
        notes.append(
            f'Solar contributed {solar.total_kwh:.1f} kWh at zero operational emissions, '
            f'avoiding approximately {avoided:.2f} kg CO2e vs diesel equivalent.'
        )

    notes.append(
        f'Grid factor ({grid_factor} kg CO2e/kWh) sourced from IEA Emissions Factors 2023 '
        f'(Nigeria grid mix). Diesel generator factor ({diesel_factor} kg CO2e/kWh) includes a '
        'small-generator inefficiency penalty typical of 1-50 kW units.'
    )
    return notes


def generate_virtual_power_insights(by_layer: Sequence, segments: Sequence,
                                    quality: VideoQuality,
                                    participant_count: Decimal) -> List[str]:
    """Notes for a streaming breakdown (devices / network / data centre).

    ``participant_count`` is the exact (possibly fractional) count the layers were
    priced with, so the per-participant figure divides back to the total.
    """
    notes = []
    layers = {entry.layer: entry for entry in by_layer}
    total_kg = total(entry.total_kg_co2e for entry in by_layer)

    device_share = share(layers['devices'].total_kg_co2e, total_kg)
    if device_share > 70:
        notes.append(
            f'End-user devices account for {device_share:.0f}% of virtual emissions. '
            'Encouraging participants to use laptops over desktops, or turn off cameras '
            'when not presenting, can meaningfully reduce this.'
        )

    if quality in (VideoQuality.HD, VideoQuality.FULL_HD):
        ratio = BITRATE_KBPS[VideoQuality.SD] / BITRATE_KBPS[quality]
        notes.append(
            f'Switching from {quality.value} to SD quality would reduce network and data centre '
            f'emissions by ~{(1 - ratio) * 100:.0f}%. '
            'Device emissions are unaffected by quality.'
        )

    mobile_count = sum(seg.count for seg in segments if seg.network != NetworkType.FIXED)
    if mobile_count > participant_count * Decimal('0.3'):
        notes.append(
            f'{mobile_count} participants (~{mobile_count / participant_count * 100:.0f}%) '
            'are on mobile networks. Mobile data transmission is 3-12x more energy-intensive '
            'than fixed broadband per GB; encouraging fixed/WiFi connections reduces network '
            'layer emissions.'
        )

    notes.append(
        'Network energy intensity figures (Aslan et al. 2018 / IEA 2020) reflect 2022-era '
        'estimates. Earlier figures (e.g. Shift Project 2019: 0.015 kWh/GB) have been revised '
        'significantly downward.'
    )

    per_participant = total_kg / participant_count
    notes.append(
        f'Per-participant footprint: {per_participant:.3f} kg CO2e '
        f'({per_participant * 1000:.1f} g CO2e per person for this event).'
    )
    return notes


def generate_catering_insights(by_item: Sequence,
                               meal_factors: Mapping = MEAL_FACTORS) -> List[str]:
    """Notes for an itemized catering breakdown."""
    notes = []
    meals = [item for item in by_item if item.category == CateringCategory.MEAL]
    meals_kg = total(item.total_kg_co2e for item in meals)
    total_kg = total(item.total_kg_co2e for item in by_item)
    meal_servings = total(item.servings for item in meals)

    if meal_servings > 0:
        meat_heavy = total(item.servings for item in meals if item.type in MEAT_HEAVY)
        plant = total(item.servings for item in meals if item.type in PLANT_BASED)
        meat_pct = share(meat_heavy, meal_servings)
        plant_pct = share(plant, meal_servings)

        if meat_pct > 50:
            vegetarian_kg = meal_servings * meal_factors[MealType.VEGETARIAN].value
            saving = meals_kg - vegetarian_kg
            notes.append(
                f'{meat_pct:.0f}% of meals are medium or high-meat. '
                'Shifting all meals to vegetarian would reduce meal emissions by '
                f'~{saving:.1f} kg CO2e ({share(saving, meals_kg):.0f}%).'
            )

        if plant_pct > 60:
            notes.append(
                f'{plant_pct:.0f}% of meals are plant-based (vegan/vegetarian), '
                'a low-impact catering choice.'
            )

        notes.append(
            f'Average meal footprint: {meals_kg / meal_servings:.2f} kg CO2e/meal '
            f'across {meal_servings:f} servings.'
        )

    water = [item for item in by_item if item.type == BeverageType.WATER_BOTTLE]
    if water:
        water_servings = total(item.servings for item in water)
        water_kg = total(item.total_kg_co2e for item in water)
        notes.append(
            f'{water_servings:f} bottles of water contribute {water_kg:.2f} kg CO2e '
            '(mostly PET packaging). Providing tap water or refillable dispensers eliminates this.'
        )

    meal_share = share(meals_kg, total_kg)
    if meal_share > 80:
        notes.append(
            f'Meals account for {meal_share:.0f}% of catering emissions. '
            'Beverage and snack choices have relatively minor impact compared to meal type '
            'selection.'
        )

    notes.append(
        'Meal factors derived from Scarborough et al. 2023 (Nature Food, n=55,504), whole-day '
        'dietary GHG divided by 3 meals/day. Beverage factors: Twomey et al. 2021 / WWF Sweden '
        '2022 / Circular Ecology LCA 2022. Snack factors: Poore & Nemecek 2018 / Carbon Trust '
        'event catering estimates. All factors cover farm-to-fork; on-site cooking energy excluded.'
    )
    return notes


def generate_transport_insights(by_mode: Sequence, estimated: bool = False) -> List[str]:
    """Notes for a per-mode transport breakdown."""
    notes = []
    total_kg = total(entry.total_kg_co2e for entry in by_mode)

    if total_kg > 0:
        dominant = max(by_mode, key=lambda entry: entry.total_kg_co2e)
        notes.append(
            f'{dominant.mode.value} is the largest transport source at '
            f'{share(dominant.total_kg_co2e, total_kg):.0f}% of travel emissions.'
        )

        flight_kg = total(e.total_kg_co2e for e in by_mode if e.mode == TransportMode.FLIGHT)
        if share(flight_kg, total_kg) > 50:
            notes.append(
                'Flights make up most of the travel footprint. Encouraging rail for journeys '
                'under ~700 km, or offering a remote attendance option, is the largest lever.'
            )

    if estimated:
        notes.append(
            'Travel was estimated from participant count using a distance distribution; '
            'supply individual journeys for a measured figure.'
        )

    notes.append(
        f'Flight factors switch from short-haul to long-haul at {LONG_HAUL_THRESHOLD_KM} km. '
        'Distances are one-way; car factors assume a sole occupant.'
    )
    return notes


def generate_waste_insights(line_items: Sequence, by_waste_type: Sequence,
                            factors: Mapping = WASTE_FACTORS) -> List[str]:
    """Notes for a waste breakdown."""
    notes = []
    total_kg = total(entry.total_kg_co2e for entry in by_waste_type)

    alternatives = {
        WasteType.FOOD: DisposalMethod.COMPOSTING,
        WasteType.PAPER_CARDBOARD: DisposalMethod.RECYCLING,
    }
    for waste_type, alternative in alternatives.items():
        landfilled = [
            item for item in line_items
            if item.waste_type == waste_type and item.disposal_method == DisposalMethod.LANDFILL
        ]
        if not landfilled:
            continue
        tonnes = total(item.tonnes for item in landfilled)
        current = total(item.kg_co2e for item in landfilled)
        diverted = tonnes * factors[waste_type][alternative].value
        saving = current - diverted
        if saving > 0:
            notes.append(
                f'{waste_type.value} sent to landfill produces {current:.2f} kg CO2e. '
                f'Switching to {alternative.value} would save ~{saving:.2f} kg CO2e.'
            )

    if total_kg > 0:
        dominant = max(by_waste_type, key=lambda entry: entry.total_kg_co2e)
        notes.append(
            f'{dominant.waste_type.value} accounts for '
            f'{share(dominant.total_kg_co2e, total_kg):.0f}% of waste emissions.'
        )

    notes.append(
        'Recycling and incineration factors cover transport to the facility only; '
        'downstream processing is attributed to the processor (GHG Protocol Scope 3 Category 5).'
    )
    return notes