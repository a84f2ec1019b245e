# Copyright (c) Syntropy Systems
"""forecastview command line interface."""
