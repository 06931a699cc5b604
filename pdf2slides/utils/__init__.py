"""
Shared helpers: matrix geometry and PowerPoint XML tweaks.
"""
