"""Dice Forge core domain"""
__version__ = "0.1.0"
