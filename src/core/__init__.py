"""
Core domain models, fixed-point math primitives, contracts and errors.

This module contains the foundational building blocks that are independent
of the external lending market (order books, controller, custodial vault).
"""
