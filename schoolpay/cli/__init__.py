"""SchoolPay command-line interface."""
