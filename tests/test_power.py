"""Tests for eventcarbon.utils.power -- energy resolution, pricing, notes."""

from __future__ import annotations

from decimal import Decimal

import pytest

from eventcarbon.utils.errors import EnumerationError, RangeError, ShapeError, UnderSpecifiedError
from eventcarbon.utils.factors import (
    POWER_FACTORS,
    EmissionFactor,
    PowerSource,
    Scope,
)
from eventcarbon.utils.power import (
    PROVENANCE_GIVEN,
    PROVENANCE_HEADCOUNT,
    PROVENANCE_LOAD,
    ExactEnergy,
    FromHeadcount,
    FromLoad,
    PowerCalculator,
    PowerEntry,
    calculate_power_emissions,
    estimate_load_kw,
    select_energy_spec,
)

MIXED_ENTRIES = [
    {'source': 'grid_electricity', 'durationHours': 4, 'loadKw': 50},
    {'source': 'diesel_generator', 'durationHours': 8, 'loadKw': 25},
]


# ── Energy resolution ─────────────────────────────────────────────


class TestSelectEnergySpec:
    """Priority order: totalKwh, then duration+load, then duration+headcount."""

    def test_total_kwh_wins_over_load(self):
        entry = PowerEntry(PowerSource.SOLAR, total_kwh=Decimal('10'),
                           duration_hours=Decimal('2'), load_kw=Decimal('100'))
        assert select_energy_spec(entry, 0) == ExactEnergy(Decimal('10'))

    def test_load_wins_over_headcount(self):
        entry = PowerEntry(PowerSource.SOLAR, duration_hours=Decimal('2'),
                           load_kw=Decimal('3'), participant_count=Decimal('100'))
        assert select_energy_spec(entry, 0) == FromLoad(Decimal('2'), Decimal('3'))

    def test_headcount(self):
        entry = PowerEntry(PowerSource.SOLAR, duration_hours=Decimal('2'),
                           participant_count=Decimal('100'))
        assert select_energy_spec(entry, 0) == FromHeadcount(Decimal('2'), Decimal('100'))

    def test_load_without_duration_is_under_specified(self):
        entry = PowerEntry(PowerSource.GRID_ELECTRICITY, load_kw=Decimal('3'))
        with pytest.raises(UnderSpecifiedError) as exc_info:
            select_energy_spec(entry, 2)
        assert exc_info.value.index == 2


class TestEstimateLoad:
    @pytest.mark.parametrize('count, expected_kw', [
        (10, Decimal('0.6')),     # 60 W/person
        (49, Decimal('2.94')),
        (50, Decimal('2.5')),     # 50 W/person
        (1000, Decimal('30')),    # 30 W/person
        (10000, Decimal('250')),  # 25 W/person
    ])
    def test_benchmark_brackets(self, count, expected_kw):
        load_kw, _ = estimate_load_kw(count)
        assert load_kw == expected_kw

    def test_returns_bracket_label(self):
        _, bracket = estimate_load_kw(300)
        assert bracket.label == 'medium (200-999)'


# ── Calculator ────────────────────────────────────────────────────


class TestCalculatePowerEmissions:
    def test_grid_and_diesel_scenario(self):
        result = calculate_power_emissions(MIXED_ENTRIES)
        by_source = {entry.source: entry for entry in result.by_source}

        assert by_source[PowerSource.GRID_ELECTRICITY].total_kwh == Decimal('200')
        assert by_source[PowerSource.DIESEL_GENERATOR].total_kwh == Decimal('200')
        assert by_source[PowerSource.GRID_ELECTRICITY].total_kg_co2e == Decimal('86.2')
        assert by_source[PowerSource.DIESEL_GENERATOR].total_kg_co2e == Decimal('140')
        assert result.total_kg_co2e == Decimal('226.2')
        assert result.total_kwh == Decimal('400')

    def test_total_kwh_used_exclusively(self):
        result = calculate_power_emissions([
            {'source': 'grid_electricity', 'totalKwh': 100, 'durationHours': 10, 'loadKw': 50},
        ])
        assert result.total_kwh == Decimal('100')
        assert result.line_items[0].provenance == PROVENANCE_GIVEN

    def test_headcount_estimate_is_reported(self):
        result = calculate_power_emissions([
            {'source': 'grid_electricity', 'durationHours': 4, 'participantCount': 100},
        ])
        breakdown = result.by_source[0]
        assert breakdown.estimated_load_kw == Decimal('5')
        assert breakdown.total_kwh == Decimal('20')
        assert breakdown.total_kg_co2e == Decimal('8.62')
        assert result.line_items[0].provenance == PROVENANCE_HEADCOUNT
        assert any('load estimated at 5.0 kW' in note for note in result.notes)

    def test_repeated_source_is_grouped(self):
        result = calculate_power_emissions([
            {'source': 'diesel_generator', 'totalKwh': 10},
            {'source': 'diesel_generator', 'totalKwh': 5},
        ])
        assert len(result.by_source) == 1
        assert result.by_source[0].total_kwh == Decimal('15')
        assert [item.provenance for item in result.line_items] == [PROVENANCE_GIVEN] * 2

    def test_accepts_entry_objects_and_snake_case(self):
        result = calculate_power_emissions([
            PowerEntry(PowerSource.GRID_ELECTRICITY, duration_hours=Decimal('1'),
                       load_kw=Decimal('10')),
            {'source': 'natural_gas', 'total_kwh': 10},
        ])
        assert result.line_items[0].provenance == PROVENANCE_LOAD
        assert result.total_kg_co2e == Decimal('4.31') + Decimal('2.02')

    def test_total_equals_sum_of_sources(self):
        result = calculate_power_emissions(MIXED_ENTRIES + [
            {'source': 'solar', 'totalKwh': 33.3333},
            {'source': 'natural_gas', 'durationHours': 1.5, 'participantCount': 777},
        ])
        assert result.total_kg_co2e == sum(e.total_kg_co2e for e in result.by_source)
        assert result.total_kg_co2e == sum(i.kg_co2e for i in result.line_items)

    def test_idempotent(self):
        assert calculate_power_emissions(MIXED_ENTRIES).to_dict() == \
            calculate_power_emissions(MIXED_ENTRIES).to_dict()

    def test_to_dict_keys(self):
        data = calculate_power_emissions(MIXED_ENTRIES).to_dict()
        assert data['totalKgCO2e'] == pytest.approx(226.2)
        assert data['factorYear'] == 2023
        assert {entry['source'] for entry in data['bySource']} == {
            'grid_electricity', 'diesel_generator'}


class TestPowerValidation:
    def test_empty_entries(self):
        with pytest.raises(ShapeError):
            calculate_power_emissions([])

    def test_not_a_list(self):
        with pytest.raises(ShapeError):
            calculate_power_emissions({'source': 'solar', 'totalKwh': 1})

    def test_unknown_source(self):
        with pytest.raises(EnumerationError) as exc_info:
            calculate_power_emissions([{'source': 'coal', 'totalKwh': 1}])
        assert exc_info.value.value == 'coal'
        assert 'grid_electricity' in str(exc_info.value)

    def test_negative_energy(self):
        with pytest.raises(RangeError) as exc_info:
            calculate_power_emissions([
                {'source': 'solar', 'totalKwh': 1},
                {'source': 'solar', 'totalKwh': -1},
            ])
        assert exc_info.value.index == 1
        assert str(exc_info.value).startswith('Entry 1:')

    def test_zero_participants(self):
        with pytest.raises(RangeError):
            calculate_power_emissions([
                {'source': 'solar', 'durationHours': 1, 'participantCount': 0},
            ])

    def test_non_finite(self):
        with pytest.raises(RangeError):
            calculate_power_emissions([{'source': 'solar', 'totalKwh': float('nan')}])

    def test_under_specified(self):
        with pytest.raises(UnderSpecifiedError) as exc_info:
            calculate_power_emissions([{'source': 'solar', 'durationHours': 3}])
        assert exc_info.value.kind == 'under_specified'

    def test_huge_energy_is_priced_exactly(self):
        result = calculate_power_emissions([{'source': 'grid_electricity', 'totalKwh': 1e27}])
        factor = POWER_FACTORS[PowerSource.GRID_ELECTRICITY].value
        assert result.total_kwh == Decimal('1e27')
        assert result.total_kg_co2e == Decimal('1e27') * factor
        assert result.total_kg_co2e.as_tuple().exponent == -3

    def test_beyond_float_range(self):
        with pytest.raises(RangeError) as exc_info:
            calculate_power_emissions([
                {'source': 'solar', 'totalKwh': 1},
                {'source': 'solar', 'totalKwh': 10 ** 400},
            ])
        assert exc_info.value.index == 1
        assert exc_info.value.field == 'total_kwh'


class TestPowerNotes:
    def test_diesel_dominant(self):
        notes = calculate_power_emissions(MIXED_ENTRIES).notes
        assert any('Diesel generator is the dominant' in note and '38%' in note for note in notes)

    def test_generator_only(self):
        notes = calculate_power_emissions([{'source': 'diesel_generator', 'totalKwh': 5}]).notes
        assert any('entirely generator-powered' in note for note in notes)

    def test_solar_credit(self):
        notes = calculate_power_emissions([{'source': 'solar', 'totalKwh': 10}]).notes
        assert any('avoiding approximately 7.00 kg CO2e' in note for note in notes)

    def test_provenance_note_last(self):
        notes = calculate_power_emissions(MIXED_ENTRIES).notes
        assert notes[-1].startswith('Grid factor')


class TestSubstituteTables:
    def test_custom_factor_table(self):
        factors = dict(POWER_FACTORS)
        factors[PowerSource.GRID_ELECTRICITY] = EmissionFactor(Decimal('1'), Scope.SCOPE_2, 'test')
        calculator = PowerCalculator(factors=factors)
        result = calculator.calculate([{'source': 'grid_electricity', 'totalKwh': 12.5}])
        assert result.total_kg_co2e == Decimal('12.5')

    def test_incomplete_table_rejected(self):
        with pytest.raises(ValueError, match='missing entries'):
            PowerCalculator(factors={PowerSource.SOLAR: POWER_FACTORS[PowerSource.SOLAR]})
