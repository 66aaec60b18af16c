"""
Development Runner
==================
Starts the viewer straight from a source checkout.

'src' is put on sys.path so `fontmap` imports resolve without
`pip install -e .`. An installed copy uses the `fontmap` console script.

Usage:
    $ python run.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from fontmap.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
