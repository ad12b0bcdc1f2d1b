"""SchoolPay: payment allocation for school fee administration.

Distributes an incoming student payment across outstanding fee categories,
either automatically (mandatory fees first, then larger balances) or through
bounded manual overrides, and records the result against fee assignments.
"""

__version__ = "0.3.0"
__author__ = "SchoolPay Contributors"
