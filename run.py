# run.py
import logging
import os
import signal
import sys

from petsched import create_app

app = create_app()
logger = logging.getLogger(__name__)


def shutdown(signum, frame):
    logger.info(f"Received signal {signum}, closing database connections")
    app.extensions['petsched'].close()
    sys.exit(0)


signal.signal(signal.SIGTERM, shutdown)
signal.signal(signal.SIGINT, shutdown)

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    logger.info(f"PetSched API listening on port {port} ({app.config['APP_ENV']})")
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=port)
