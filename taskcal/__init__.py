"""taskcal - personal task calendar"""
__version__ = "0.1.0"
