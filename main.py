#!/usr/bin/env python3
"""
Rehearsal Link - Main Entry Point

Same as the `rehearsal-link` console script:
    python main.py analyze take1.wav
"""

import sys
from pathlib import Path

# Load .env file (for local development)
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from rehearsal_link.cli import main


if __name__ == "__main__":
    sys.exit(main())
