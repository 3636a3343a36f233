"""
Jalsampada Forms

Metadata-driven create/edit forms for Frappe doctypes of the Jalsampada
water-resources system.
"""

__version__ = "0.1.0"
