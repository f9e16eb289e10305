"""
Tech Talk Portal configuration
"""
from pathlib import Path
import os

# Project root - can be overridden with environment variable
PROJECT_ROOT = Path(os.environ.get('TECHTALK_ROOT', Path.home() / 'TechTalks'))

# Data directory (created when the store is opened)
DATA_DIR = PROJECT_ROOT / ".techtalk"

# Database path
DB_PATH = str(DATA_DIR / "techtalk.db")

# Logging
LOG_LEVEL = os.environ.get('TECHTALK_LOG_LEVEL', 'WARNING').upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
