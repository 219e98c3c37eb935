#!/usr/bin/env python3
"""
BoxCad - Parametrische Box mit Deckel als STEP
Einstiegspunkt
"""

import sys
import os

# Füge Projektverzeichnis zum Pfad hinzu
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


if __name__ == "__main__":
    from boxcad.cli import main

    sys.exit(main())
