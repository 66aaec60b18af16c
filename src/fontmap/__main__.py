"""
Run with: python -m fontmap
"""
import sys

from fontmap.main import main

sys.exit(main())
