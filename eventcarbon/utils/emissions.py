"""
CO2e Emission Calculation Module
Single entry point that routes a domain payload to the matching calculator,
plus read-only listings of the factor tables.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from eventcarbon.utils.catering import calculate_catering_emissions, estimate_catering_emissions
from eventcarbon.utils.errors import EnumerationError
from eventcarbon.utils.factors import (
    CATERING_FACTORS,
    LOAD_BENCHMARKS,
    LONG_HAUL_FLIGHT_FACTOR,
    LONG_HAUL_THRESHOLD_KM,
    POWER_FACTORS,
    PRESET_DISTRIBUTIONS,
    TRANSPORT_FACTORS,
    WASTE_FACTORS,
)
from eventcarbon.utils.power import calculate_power_emissions
from eventcarbon.utils.transport import calculate_transport_emissions, estimate_transport_emissions
from eventcarbon.utils.validation import get_field, require_mapping
from eventcarbon.utils.virtual_power import calculate_virtual_power_emissions
from eventcarbon.utils.waste import calculate_waste_emissions

DOMAINS = (
    'power',
    'virtual_power',
    'catering',
    'catering_estimate',
    'transport',
    'transport_estimate',
    'waste',
)

FACTOR_DOMAINS = ('power', 'catering', 'transport', 'waste')


def calculate_domain_emission(domain: str, payload: Mapping[str, Any]):
    """
    Universal function to calculate emissions for any domain

    Args:
        domain: One of DOMAINS
        payload: Domain-specific request body (entries / items / journeys /
            servings / participantCount ...)

    Returns:
        The calculator's result object
    """
    payload = require_mapping(payload, 'payload')

    if domain == 'power':
        return calculate_power_emissions(get_field(payload, 'entries'))

    elif domain == 'virtual_power':
        return calculate_virtual_power_emissions(payload)

    elif domain == 'catering':
        return calculate_catering_emissions(get_field(payload, 'items'))

    elif domain == 'catering_estimate':
        return estimate_catering_emissions(get_field(payload, 'servings'))

    elif domain == 'transport':
        return calculate_transport_emissions(get_field(payload, 'journeys'))

    elif domain == 'transport_estimate':
        return estimate_transport_emissions(
            get_field(payload, 'participant_count'),
            preset=get_field(payload, 'preset'),
            custom_distribution=get_field(payload, 'custom_distribution'),
        )

    elif domain == 'waste':
        return calculate_waste_emissions(get_field(payload, 'items'))

    raise EnumerationError(
        f'Unknown domain: {domain}. Valid domains: {", ".join(DOMAINS)}',
        field='domain', value=domain,
    )


def get_emission_factors(domain: str) -> Dict[str, Any]:
    """
    Get the emission factors for a domain (for display/configuration)

    Returns:
        dict: JSON-ready copy of the domain's factor tables
    """
    if domain == 'power':
        return {
            'factors': {source.value: f.to_dict() for source, f in POWER_FACTORS.items()},
            'loadBenchmarks': [
                {
                    'maxParticipants': None if b.max_participants == float('inf')
                    else int(b.max_participants),
                    'wattsPerPerson': float(b.watts_per_person),
                    'label': b.label,
                }
                for b in LOAD_BENCHMARKS
            ],
        }

    if domain == 'catering':
        return {
            'factors': {
                category.value: {t.value: f.to_dict() for t, f in table.items()}
                for category, table in CATERING_FACTORS.items()
            },
        }

    if domain == 'transport':
        return {
            'factors': {mode.value: f.to_dict() for mode, f in TRANSPORT_FACTORS.items()},
            'longHaulFlight': LONG_HAUL_FLIGHT_FACTOR.to_dict(),
            'longHaulThresholdKm': float(LONG_HAUL_THRESHOLD_KM),
            'presets': {
                preset.value: [
                    {
                        'band': band.label,
                        'probability': float(band.probability),
                        'representativeKm': float(band.representative_km),
                        'mode': band.mode.value,
                    }
                    for band in bands
                ]
                for preset, bands in PRESET_DISTRIBUTIONS.items()
            },
        }

    if domain == 'waste':
        return {
            'factors': {
                waste_type.value: {m.value: f.to_dict() for m, f in row.items()}
                for waste_type, row in WASTE_FACTORS.items()
            },
        }

    raise EnumerationError(
        f'Unknown factor domain: {domain}. Valid domains: {", ".join(FACTOR_DOMAINS)}',
        field='domain', value=domain,
    )
