#!/usr/bin/env python3
"""
Desmos Code Hub - STAAR Blitz Code Generator
============================================
Run: python3 codehub/app.py
API: http://localhost:3000/api/status
"""

import os
import sys
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv

# Load environment variables
_app_dir = os.path.dirname(os.path.abspath(__file__))
_root_dir = os.path.dirname(_app_dir)
load_dotenv(os.path.join(_root_dir, '.env'))

# Allow running as a script from the repository root
if _root_dir not in sys.path:
    sys.path.insert(0, _root_dir)

from codehub.config import HOST, PORT, DEBUG, MAX_UPLOAD_BYTES
from codehub.errors import CodeHubError
from codehub.routes import register_routes

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_BYTES
CORS(app)

register_routes(app)


# ══════════════════════════════════════════════════════════════
# ERROR HANDLERS
# ══════════════════════════════════════════════════════════════

@app.errorhandler(CodeHubError)
def handle_codehub_error(e):
    logger.warning("Request failed: %s", e.message)
    return jsonify({"error": e.message}), e.status_code


@app.errorhandler(413)
def handle_too_large(e):
    return jsonify({"error": "Upload is too large"}), 413


# ══════════════════════════════════════════════════════════════
# MAIN
# ══════════════════════════════════════════════════════════════

if __name__ == '__main__':
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    print()
    print("+" + "=" * 50 + "+")
    print("|  Desmos Code Hub - STAAR Blitz Code Generator    |")
    print("+" + "=" * 50 + "+")
    print("|                                                  |")
    print(f"|  API running at:  http://localhost:{PORT:<14}|")
    print("|                                                  |")
    print("|  Press Ctrl+C to stop                            |")
    print("+" + "=" * 50 + "+")
    print()

    app.run(host=HOST, port=PORT, debug=DEBUG)
