"""
Lets the test suite import the package from a source checkout.
"""
