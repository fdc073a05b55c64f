"""Main entry point for the token bucket tools"""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from tokenbucket.cli import main


if __name__ == "__main__":
    sys.exit(main())
