"""
Emission Calculation Routes
Thin JSON adapter over the domain calculators, the event composer and the
factor listings.
"""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from eventcarbon.utils.co2_calculation import co2_calculation_service
from eventcarbon.utils.emissions import calculate_domain_emission, get_emission_factors
from eventcarbon.utils.errors import EmissionValidationError

calculations_bp = Blueprint('calculations', __name__)


@calculations_bp.route('/power', methods=['POST', 'OPTIONS'])
def power():
    """Price on-site power entries."""
    return _calculate('power')


@calculations_bp.route('/virtual-power', methods=['POST', 'OPTIONS'])
def virtual_power():
    """Estimate streaming emissions for a virtual or hybrid event."""
    return _calculate('virtual_power')


@calculations_bp.route('/catering', methods=['POST', 'OPTIONS'])
def catering():
    return _calculate('catering')


@calculations_bp.route('/catering/estimate', methods=['POST', 'OPTIONS'])
def catering_estimate():
    return _calculate('catering_estimate')


@calculations_bp.route('/transport', methods=['POST', 'OPTIONS'])
def transport():
    return _calculate('transport')


@calculations_bp.route('/transport/estimate', methods=['POST', 'OPTIONS'])
def transport_estimate():
    """Estimate travel emissions from participant count and an event preset."""
    return _calculate('transport_estimate')


@calculations_bp.route('/waste', methods=['POST', 'OPTIONS'])
def waste():
    return _calculate('waste')


@calculations_bp.route('/event', methods=['POST', 'OPTIONS'])
def event():
    """Combined breakdown for an event (energy, travel, catering, waste)."""
    if request.method == 'OPTIONS':
        return _cors_preflight_response('POST, OPTIONS')

    raw_payload = request.get_json(silent=True)
    if raw_payload is None:
        return _error('Request body must be JSON'), 400

    print(f"[Emissions API] Event calculation request keys: {_keys(raw_payload)}")
    try:
        result = co2_calculation_service.calculate(raw_payload)
    except EmissionValidationError as exc:
        print(f"[Emissions API] Validation error (event): {exc}")
        return _validation_error(exc), 400

    print(f"[Emissions API] Event total: {result.total_co2} kg ({result.total_source})")
    return jsonify({'success': True, 'result': result.to_dict()}), 200


@calculations_bp.route('/factors/<domain>', methods=['GET', 'OPTIONS'])
def factors(domain: str):
    """List the emission factors used for a domain."""
    if request.method == 'OPTIONS':
        return _cors_preflight_response('GET, OPTIONS')

    try:
        listing = get_emission_factors(domain)
    except EmissionValidationError as exc:
        print(f"[Emissions API] Unknown factor domain: {domain}")
        return _validation_error(exc), 404
    return jsonify({'success': True, 'domain': domain, **listing}), 200


def _calculate(domain: str):
    if request.method == 'OPTIONS':
        return _cors_preflight_response('POST, OPTIONS')

    raw_payload = request.get_json(silent=True)
    if raw_payload is None:
        return _error('Request body must be JSON'), 400

    print(f"[Emissions API] {domain} request keys: {_keys(raw_payload)}")
    try:
        result = calculate_domain_emission(domain, raw_payload)
    except EmissionValidationError as exc:
        print(f"[Emissions API] Validation error ({domain}): {exc}")
        return _validation_error(exc), 400

    print(f"[Emissions API] {domain} total: {result.total_kg_co2e} kg CO2e")
    return jsonify({'success': True, 'result': result.to_dict()}), 200


def _keys(payload: Any):
    return list(payload.keys()) if isinstance(payload, dict) else type(payload).__name__


def _cors_preflight_response(methods: str):
    response = jsonify({'status': 'ok'})
    origin = request.headers.get('Origin', '*')
    response.headers.add('Access-Control-Allow-Origin', origin)
    response.headers.add('Access-Control-Allow-Methods', methods)
    response.headers.add('Access-Control-Allow-Headers', request.headers.get('Access-Control-Request-Headers', 'Content-Type'))
    return response, 204


def _error(message: str):
    payload: Dict[str, Any] = {'success': False, 'error': message}
    return jsonify(payload)


def _validation_error(exc: EmissionValidationError):
    payload: Dict[str, Any] = {'success': False}
    payload.update(exc.to_dict())
    return jsonify(payload)
