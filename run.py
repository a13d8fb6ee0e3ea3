# run.py
import os
import sys
import logging

from dreamstudio import create_app

try:
    app = create_app()
except Exception as e:
    logging.critical(f"Failed to start server: {e}", exc_info=True)
    sys.exit(1)

if __name__ == '__main__':
    host = os.getenv('FLASK_RUN_HOST', '127.0.0.1')
    port = int(os.getenv('PORT') or os.getenv('FLASK_RUN_PORT', 5000))
    debug = app.config.get('DEBUG', False)
    app.run(host=host, port=port, debug=debug)
