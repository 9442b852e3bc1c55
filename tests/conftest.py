"""
Pytest configuration.
Puts the project root on sys.path and switches settings to the testing
environment before anything imports app.config.
"""

import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ.setdefault("ENVIRONMENT", "testing")
# Minimum bcrypt cost keeps password tests fast
os.environ.setdefault("PASSWORD_BCRYPT_ROUNDS", "4")
