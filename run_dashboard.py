#!/usr/bin/env python3
"""Direct launcher for the House Expenses dashboard."""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()

if __name__ == "__main__":
    os.chdir(project_root)
    subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(project_root / "house_expenses" / "dashboard.py"),
    ])
