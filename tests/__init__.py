"""Test package for Type Ace.

This package contains unit tests for the typing test core and headless
simulations of full sessions driven by a fake clock. The UI smoke tests run
pygame with the dummy video driver so no real window is opened. To run these
tests, execute ``pytest`` from the project root.
"""
