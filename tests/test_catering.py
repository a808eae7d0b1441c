"""Tests for eventcarbon.utils.catering -- itemized menus and serving estimates."""

from __future__ import annotations

from decimal import Decimal

import pytest

from eventcarbon.utils.catering import (
    CateringCalculator,
    calculate_catering_emissions,
    estimate_catering_emissions,
)
from eventcarbon.utils.errors import EnumerationError, RangeError, ShapeError
from eventcarbon.utils.factors import CateringCategory, MealType

MENU = [
    {'category': 'meal', 'type': 'high_meat', 'servings': 60},
    {'category': 'meal', 'type': 'vegan', 'servings': 40},
    {'category': 'beverage', 'type': 'coffee_with_milk', 'servings': 100},
    {'category': 'beverage', 'type': 'water_bottle', 'servings': 50},
]


class TestCalculateCatering:
    def test_menu_totals(self):
        result = calculate_catering_emissions(MENU)

        assert result.by_category[CateringCategory.MEAL] == Decimal('182.4')
        assert result.by_category[CateringCategory.BEVERAGE] == Decimal('34')
        assert result.by_category[CateringCategory.SNACK] == 0
        assert result.total_kg_co2e == Decimal('216.4')
        assert result.total_servings == Decimal('250')

    def test_total_equals_sum_of_categories_and_items(self):
        result = calculate_catering_emissions(MENU + [
            {'category': 'snack', 'type': 'pastry', 'servings': 33.3},
            {'category': 'beverage', 'type': 'tea', 'servings': 7},
        ])
        assert result.total_kg_co2e == sum(result.by_category.values())
        assert result.total_kg_co2e == sum(item.total_kg_co2e for item in result.by_item)

    def test_item_labels(self):
        result = calculate_catering_emissions(MENU)
        assert result.by_item[0].label == 'High-meat (>=100 g/day)'
        assert result.by_item[0].kg_co2e_per_serving == Decimal('2.40')

    def test_zero_servings_allowed(self):
        result = calculate_catering_emissions([{'category': 'snack', 'type': 'fruit', 'servings': 0}])
        assert result.total_kg_co2e == 0

    def test_to_dict_categories(self):
        data = calculate_catering_emissions(MENU).to_dict()
        assert data['byCategory'] == {
            'meals': pytest.approx(182.4),
            'beverages': pytest.approx(34.0),
            'snacks': 0.0,
        }

    def test_idempotent(self):
        assert calculate_catering_emissions(MENU).to_dict() == \
            calculate_catering_emissions(MENU).to_dict()


class TestCateringNotes:
    def test_meat_heavy_note(self):
        notes = calculate_catering_emissions(MENU).notes
        assert any('60% of meals are medium or high-meat' in note and '~55.4 kg CO2e' in note
                   for note in notes)

    def test_bottled_water_note(self):
        notes = calculate_catering_emissions(MENU).notes
        assert any('bottles of water contribute 6.00 kg CO2e' in note for note in notes)

    def test_plant_based_note(self):
        notes = calculate_catering_emissions([
            {'category': 'meal', 'type': 'vegetarian', 'servings': 10},
        ]).notes
        assert any('plant-based' in note for note in notes)

    def test_notes_do_not_change_totals(self):
        result = calculate_catering_emissions(MENU)
        assert result.total_kg_co2e == Decimal('216.4')


class TestCateringValidation:
    def test_empty(self):
        with pytest.raises(ShapeError):
            calculate_catering_emissions([])

    def test_unknown_category(self):
        with pytest.raises(EnumerationError):
            calculate_catering_emissions([{'category': 'dessert', 'type': 'cake', 'servings': 1}])

    def test_type_from_other_category(self):
        with pytest.raises(EnumerationError) as exc_info:
            calculate_catering_emissions([
                {'category': 'meal', 'type': 'vegan', 'servings': 1},
                {'category': 'meal', 'type': 'tea', 'servings': 1},
            ])
        assert exc_info.value.index == 1
        assert exc_info.value.value == 'tea'

    def test_negative_servings(self):
        with pytest.raises(RangeError):
            calculate_catering_emissions([{'category': 'meal', 'type': 'vegan', 'servings': -1}])

    def test_missing_servings(self):
        with pytest.raises(RangeError):
            calculate_catering_emissions([{'category': 'meal', 'type': 'vegan'}])


class TestEstimateCatering:
    def test_default_profile_200(self):
        estimate = estimate_catering_emissions(200)
        assert estimate.total_kg_co2e == Decimal('380.5')
        assert estimate.kg_co2e_per_serving == Decimal('1.903')
        assert estimate.servings == Decimal('200')
        assert '40% high-meat' in estimate.note

    def test_blended_factor(self):
        assert CateringCalculator().blended_meal_factor() == Decimal('1.9025')

    @pytest.mark.parametrize('servings', [0, -5, 'many', None])
    def test_invalid_servings(self, servings):
        with pytest.raises(RangeError):
            estimate_catering_emissions(servings)

    def test_custom_profile(self):
        calculator = CateringCalculator(diet_profile=((MealType.VEGAN, Decimal('1')),))
        assert calculator.estimate(10).total_kg_co2e == Decimal('9.6')

    def test_profile_must_sum_to_one(self):
        with pytest.raises(ValueError, match='sum to 1.0'):
            CateringCalculator(diet_profile=((MealType.VEGAN, Decimal('0.5')),))
