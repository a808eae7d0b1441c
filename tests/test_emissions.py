"""Tests for eventcarbon.utils.emissions -- domain dispatch and factor listings."""

from __future__ import annotations

from decimal import Decimal

import pytest

from eventcarbon.utils.emissions import (
    DOMAINS,
    FACTOR_DOMAINS,
    calculate_domain_emission,
    get_emission_factors,
)
from eventcarbon.utils.errors import EnumerationError, ShapeError

PAYLOADS = {
    'power': {'entries': [{'source': 'grid_electricity', 'totalKwh': 100}]},
    'virtual_power': {'participantCount': 20, 'durationHours': 1},
    'catering': {'items': [{'category': 'meal', 'type': 'vegan', 'servings': 10}]},
    'catering_estimate': {'servings': 200},
    'transport': {'journeys': [{'distanceKm': 10, 'mode': 'bus'}]},
    'transport_estimate': {'participantCount': 150, 'preset': 'national'},
    'waste': {'items': [{'wasteType': 'food', 'disposalMethod': 'landfill', 'quantityG': 40000}]},
}


class TestCalculateDomainEmission:
    @pytest.mark.parametrize('domain', DOMAINS)
    def test_every_domain_dispatches(self, domain):
        result = calculate_domain_emission(domain, PAYLOADS[domain])
        assert result.total_kg_co2e >= 0
        assert 'totalKgCO2e' in result.to_dict()

    def test_power_result(self):
        result = calculate_domain_emission('power', PAYLOADS['power'])
        assert result.total_kg_co2e == Decimal('43.1')

    def test_catering_estimate_result(self):
        result = calculate_domain_emission('catering_estimate', PAYLOADS['catering_estimate'])
        assert result.total_kg_co2e == Decimal('380.5')

    def test_transport_estimate_result(self):
        result = calculate_domain_emission('transport_estimate', PAYLOADS['transport_estimate'])
        assert result.active_preset.value == 'national'

    def test_unknown_domain(self):
        with pytest.raises(EnumerationError, match='Unknown domain'):
            calculate_domain_emission('flights', {})

    def test_payload_must_be_object(self):
        with pytest.raises(ShapeError):
            calculate_domain_emission('power', [1, 2, 3])

    def test_missing_entries(self):
        with pytest.raises(ShapeError):
            calculate_domain_emission('power', {})


class TestGetEmissionFactors:
    @pytest.mark.parametrize('domain', FACTOR_DOMAINS)
    def test_listing_has_factors(self, domain):
        assert get_emission_factors(domain)['factors']

    def test_power_listing(self):
        listing = get_emission_factors('power')
        assert listing['factors']['diesel_generator']['factorValue'] == pytest.approx(0.7)
        assert listing['factors']['diesel_generator']['scope'] == 'scope_1'
        assert listing['loadBenchmarks'][-1]['maxParticipants'] is None

    def test_transport_listing(self):
        listing = get_emission_factors('transport')
        assert listing['longHaulThresholdKm'] == 3700.0
        assert set(listing['presets']) == {'local', 'regional', 'national', 'international'}

    def test_catering_and_waste_listing(self):
        assert get_emission_factors('catering')['factors']['meal']['vegan']['factorValue'] == \
            pytest.approx(0.96)
        assert get_emission_factors('waste')['factors']['food']['landfill']['factorValue'] == \
            pytest.approx(578.0)

    def test_unknown_factor_domain(self):
        with pytest.raises(EnumerationError):
            get_emission_factors('virtual_power')
