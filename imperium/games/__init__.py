"""
Game catalogs.

Each game provides its static data: card definitions, factions and
rule constants.
"""
