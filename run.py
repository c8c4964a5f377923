#!/usr/bin/env python3
"""
Trackbox - track sharing backend

Single entry point for the development server.
Run with: python run.py
"""

import os

from dotenv import load_dotenv
load_dotenv()

from app import create_app

app = create_app()

if __name__ == '__main__':
    host = os.getenv('TRACKBOX_HOST', '0.0.0.0')
    port = int(os.getenv('TRACKBOX_PORT', '5001'))

    app.logger.info('Trackbox listening on http://%s:%s', host, port)
    app.run(debug=False, host=host, port=port, threaded=True)
