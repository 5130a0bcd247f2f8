"""Test package for Math Grid.

Core tests exercise the board, run state and tick scheduler deterministically
with seeded RNGs and a fake clock. The pygame tests run headlessly using the
SDL dummy video/audio drivers. Run ``pytest`` from the project root.
"""
