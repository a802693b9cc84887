"""
Medgate CLI commands.
"""
