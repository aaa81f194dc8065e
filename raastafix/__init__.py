"""
RaastaFix - Civic issue reporting
Citizen reports of road and utility problems, triaged by local authorities.
"""

__version__ = "0.2.0"
