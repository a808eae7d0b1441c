"""
EventCarbon - Main Flask Application
Event greenhouse-gas footprint API
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
import os
from dotenv import load_dotenv

from eventcarbon import __version__
from eventcarbon.routes.calculations import calculations_bp

# Load environment variables
load_dotenv()

# Initialize Flask app
app = Flask(__name__)

# Configure CORS for frontend communication
default_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# CORS_ORIGINS supports a comma-separated list of extra origins
extra_origins = os.getenv("CORS_ORIGINS")
if extra_origins:
    for origin in extra_origins.split(","):
        origin = origin.strip()
        if origin:
            default_cors_origins.append(origin)

print(f"[CORS] Allowed origins: {default_cors_origins}")

CORS(app, resources={
    r"/api/*": {
        "origins": default_cors_origins,
        "methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": ["Content-Type", "Authorization"],
    }
})

# Configuration
app.config['DEBUG'] = os.getenv('DEBUG', 'False').lower() == 'true'

# Register blueprints
app.register_blueprint(calculations_bp, url_prefix='/api/emissions')


# Health check endpoint
@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint to verify server is running"""
    return jsonify({
        'status': 'healthy',
        'message': 'EventCarbon API is running',
    }), 200


# Root endpoint
@app.route('/', methods=['GET'])
def root():
    """Root endpoint"""
    return jsonify({
        'message': 'EventCarbon API',
        'version': __version__,
        'endpoints': {
            'health': '/api/health',
            'power': '/api/emissions/power',
            'virtual_power': '/api/emissions/virtual-power',
            'catering': '/api/emissions/catering',
            'catering_estimate': '/api/emissions/catering/estimate',
            'transport': '/api/emissions/transport',
            'transport_estimate': '/api/emissions/transport/estimate',
            'waste': '/api/emissions/waste',
            'event': '/api/emissions/event',
            'factors': '/api/emissions/factors/<domain>',
        }
    }), 200


# Error handlers
@app.errorhandler(404)
def not_found(error):
    print(f"[404] Not Found: {request.method} {request.path} Origin={request.headers.get('Origin', '')}")
    return jsonify({'error': 'Endpoint not found', 'path': request.path}), 404


@app.errorhandler(500)
def internal_error(error):
    return jsonify({'error': 'Internal server error'}), 500


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    debug = app.config['DEBUG']

    print(f"\n[STARTING] EventCarbon Server...")
    print(f"[INFO] Port: {port}")
    print(f"[INFO] Debug: {debug}")
    print(f"[INFO] API URL: http://localhost:{port}\n")

    app.run(host='0.0.0.0', port=port, debug=debug)
