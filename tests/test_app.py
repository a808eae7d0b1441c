"""Tests for the Flask API (eventcarbon.app and the calculations blueprint)."""

from __future__ import annotations

import pytest

from eventcarbon.app import app


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_root_lists_endpoints(self, client):
        data = client.get('/').get_json()
        assert data['endpoints']['event'] == '/api/emissions/event'

    def test_unknown_route(self, client):
        response = client.get('/api/nope')
        assert response.status_code == 404
        assert response.get_json()['path'] == '/api/nope'


class TestCalculationEndpoints:
    def test_power(self, client):
        response = client.post('/api/emissions/power', json={'entries': [
            {'source': 'grid_electricity', 'durationHours': 4, 'loadKw': 50},
            {'source': 'diesel_generator', 'durationHours': 8, 'loadKw': 25},
        ]})
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['result']['totalKgCO2e'] == pytest.approx(226.2)

    def test_virtual_power(self, client):
        response = client.post('/api/emissions/virtual-power',
                               json={'participantCount': 100, 'durationHours': 1})
        assert response.status_code == 200
        assert response.get_json()['result']['totalDataGb'] == pytest.approx(135.0)

    def test_catering_estimate(self, client):
        response = client.post('/api/emissions/catering/estimate', json={'servings': 200})
        assert response.get_json()['result']['totalKgCO2e'] == pytest.approx(380.5)

    def test_catering(self, client):
        response = client.post('/api/emissions/catering', json={'items': [
            {'category': 'snack', 'type': 'fruit', 'servings': 10},
        ]})
        assert response.get_json()['result']['byCategory']['snacks'] == pytest.approx(1.0)

    def test_transport(self, client):
        response = client.post('/api/emissions/transport', json={'journeys': [
            {'distanceKm': 800, 'mode': 'flight'},
        ]})
        assert response.get_json()['result']['totalKgCO2e'] == pytest.approx(148.72)

    def test_transport_estimate(self, client):
        response = client.post('/api/emissions/transport/estimate',
                               json={'participantCount': 150, 'preset': 'national'})
        result = response.get_json()['result']
        assert result['inferredPreset'] == 'local'
        assert result['activePreset'] == 'national'
        assert result['presetSource'] == 'explicit'

    def test_waste(self, client):
        response = client.post('/api/emissions/waste', json={'items': [
            {'wasteType': 'food', 'disposalMethod': 'landfill', 'quantityG': 40000},
        ]})
        assert response.get_json()['result']['totalKgCO2e'] == pytest.approx(23.12)

    def test_event(self, client):
        response = client.post('/api/emissions/event', json={
            'energyKwh': 100, 'wasteKg': 10, 'numParticipants': 150, 'cateringMeals': 200,
            'totalCo2': 999,
        })
        result = response.get_json()['result']
        assert result['totalCo2'] == 999.0
        assert result['totalSource'] == 'stored'

    def test_factors(self, client):
        response = client.get('/api/emissions/factors/waste')
        assert response.status_code == 200
        assert response.get_json()['domain'] == 'waste'

    def test_unknown_factor_domain(self, client):
        response = client.get('/api/emissions/factors/plutonium')
        assert response.status_code == 404
        assert response.get_json()['kind'] == 'enumeration'


class TestErrorResponses:
    def test_validation_error_payload(self, client):
        response = client.post('/api/emissions/power', json={'entries': [
            {'source': 'coal', 'totalKwh': 1},
        ]})
        assert response.status_code == 400
        data = response.get_json()
        assert data['success'] is False
        assert data['kind'] == 'enumeration'
        assert data['index'] == 0
        assert data['value'] == 'coal'

    def test_empty_entries(self, client):
        response = client.post('/api/emissions/waste', json={'items': []})
        assert response.status_code == 400
        assert response.get_json()['kind'] == 'shape'

    def test_body_must_be_json(self, client):
        response = client.post('/api/emissions/power', data='not json',
                               content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Request body must be JSON'

    def test_body_must_be_object(self, client):
        response = client.post('/api/emissions/catering', json=[1, 2])
        assert response.status_code == 400
        assert response.get_json()['kind'] == 'shape'

    def test_event_validation(self, client):
        response = client.post('/api/emissions/event', json={
            'energyKwh': 100, 'wasteKg': 10, 'numParticipants': 0, 'cateringMeals': 200,
        })
        assert response.status_code == 400
        assert response.get_json()['kind'] == 'range'

    def test_huge_energy_is_accepted(self, client):
        response = client.post('/api/emissions/power', json={'entries': [
            {'source': 'grid_electricity', 'totalKwh': 1e27},
        ]})
        assert response.status_code == 200
        assert response.get_json()['result']['totalKwh'] == pytest.approx(1e27)

    def test_number_beyond_float_range(self, client):
        response = client.post('/api/emissions/waste', json={'items': [
            {'wasteType': 'food', 'disposalMethod': 'landfill', 'quantityG': 10 ** 400},
        ]})
        assert response.status_code == 400
        data = response.get_json()
        assert data['kind'] == 'range'
        assert data['index'] == 0

    def test_integral_float_participant_count(self, client):
        response = client.post('/api/emissions/transport/estimate',
                               json={'participantCount': 150.0})
        assert response.status_code == 200
        assert response.get_json()['result']['participantCount'] == 150

    def test_distribution_error(self, client):
        response = client.post('/api/emissions/transport/estimate', json={
            'participantCount': 10,
            'customDistribution': [
                {'minKm': 0, 'probability': 0.2, 'representativeKm': 5, 'mode': 'bus'},
            ],
        })
        assert response.status_code == 400
        assert response.get_json()['kind'] == 'distribution'
