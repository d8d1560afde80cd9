"""
NutriCare - report and summary aggregation for clinical nutrition practice.
"""
__version__ = "1.0.0"
