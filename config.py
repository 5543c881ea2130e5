"""Configuration loader for iLO Admin.

Values can be overridden with environment variables or a .env file in the
directory ilo-admin is started from.
"""

import os
from pathlib import Path
from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True))

WORK_DIR = Path.cwd()

# Credentials applied to every iLO in a batch
ILO_USER = os.getenv('ILO_USER', 'Administrator')
ILO_PASS = os.getenv('ILO_PASS', '')

HOSTS_FILE = os.getenv('ILO_HOSTS_FILE', str(WORK_DIR / 'ilo_hosts.yaml'))

# iLO ships with self-signed certificates
VERIFY_TLS = os.getenv('ILO_VERIFY_TLS', 'false').lower() == 'true'
REQUEST_TIMEOUT = float(os.getenv('ILO_TIMEOUT', '30'))

LOG_PATH = os.getenv('ILO_LOG_PATH', str(WORK_DIR / 'ilo_admin.log'))
LOG_LEVEL = os.getenv('ILO_LOG_LEVEL', 'INFO').upper()

DB_PATH = os.getenv('ILO_DB_PATH', str(WORK_DIR / 'ilo_admin.sqlite'))
RECORD_HISTORY = os.getenv('ILO_RECORD_HISTORY', 'false').lower() == 'true'

VERSION = os.getenv('ILO_VERSION', '0.1.0')
