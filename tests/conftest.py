"""
Pytest configuration: make the src/ package importable without installing.
"""

import sys
from pathlib import Path

src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))
