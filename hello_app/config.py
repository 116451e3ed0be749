import os

HOST = os.environ.get('HOST', '0.0.0.0')
PORT = int(os.environ.get('PORT') or 5000)
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
