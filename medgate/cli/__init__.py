"""
Medgate command-line interface.
"""
