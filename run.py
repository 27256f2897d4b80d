#!/usr/bin/env python3
"""
Simple run script for the Portmaster Game Checker Flask application
"""

import logging
import os
from portcheck import create_app

if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = create_app()
    port = int(os.environ.get('PORT', 5505))
    print("🚀 Starting Portmaster Game Checker...")
    print(f"🎮 Open your browser and go to: http://localhost:{port}")
    print("🔑 Get a Steam API key from: https://steamcommunity.com/dev/apikey")
    print("⚠️  Press Ctrl+C to stop the server")
    app.run(debug=True, host='0.0.0.0', port=port)
