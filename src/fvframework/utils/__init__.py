"""
Contains some useful utility functions to be used in validators.
"""
from .query_object import optional_option, required_option
