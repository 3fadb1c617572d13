"""
Faction catalog.

All playable factions from the base game and its expansions, plus the
special rules the engine needs to know about.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Faction:
    faction_id: str
    name: str
    expansion: str


FACTIONS: tuple[Faction, ...] = (
    # Base game
    Faction("arborec", "The Arborec", "base"),
    Faction("barony-of-letnev", "The Barony of Letnev", "base"),
    Faction("clan-of-saar", "The Clan of Saar", "base"),
    Faction("embers-of-muaat", "The Embers of Muaat", "base"),
    Faction("emirates-of-hacan", "The Emirates of Hacan", "base"),
    Faction("federation-of-sol", "The Federation of Sol", "base"),
    Faction("ghosts-of-creuss", "The Ghosts of Creuss", "base"),
    Faction("l1z1x-mindnet", "The L1Z1X Mindnet", "base"),
    Faction("mentak-coalition", "The Mentak Coalition", "base"),
    Faction("naalu-collective", "The Naalu Collective", "base"),
    Faction("nekro-virus", "The Nekro Virus", "base"),
    Faction("sardakk-norr", "Sardakk N'orr", "base"),
    Faction("universities-of-jol-nar", "The Universities of Jol-Nar", "base"),
    Faction("winnu", "The Winnu", "base"),
    Faction("xxcha-kingdom", "The Xxcha Kingdom", "base"),
    Faction("yin-brotherhood", "The Yin Brotherhood", "base"),
    Faction("yssaril-tribes", "The Yssaril Tribes", "base"),
    # Prophecy of Kings
    Faction("argent-flight", "The Argent Flight", "pok"),
    Faction("empyrean", "The Empyrean", "pok"),
    Faction("mahact-gene-sorcerers", "The Mahact Gene-Sorcerers", "pok"),
    Faction("naaz-rokha-alliance", "The Naaz-Rokha Alliance", "pok"),
    Faction("nomad", "The Nomad", "pok"),
    Faction("titans-of-ul", "The Titans of Ul", "pok"),
    Faction("vuil-raith-cabal", "The Vuil'Raith Cabal", "pok"),
    # Codex
    Faction("council-keleres-argent", "The Council Keleres (Argent)", "codex"),
    Faction("council-keleres-mentak", "The Council Keleres (Mentak)", "codex"),
    Faction("council-keleres-xxcha", "The Council Keleres (Xxcha)", "codex"),
    # Thunder's Edge
    Faction("last-bastion", "Last Bastion", "thunders-edge"),
    Faction("ral-nel-consortium", "The Ral Nel Consortium", "thunders-edge"),
    Faction("deepwrought-scholarate", "The Deepwrought Scholarate", "thunders-edge"),
    Faction("crimson-rebellion", "The Crimson Rebellion", "thunders-edge"),
    Faction("firmament-obsidian", "The Firmament / The Obsidian", "thunders-edge"),
)

# Factions whose effective initiative is always 0 while they hold a card
ALWAYS_FIRST_FACTIONS: frozenset[str] = frozenset({"naalu-collective"})


def get_faction(faction_id: str) -> Faction | None:
    for faction in FACTIONS:
        if faction.faction_id == faction_id:
            return faction
    return None


def get_factions_by_expansion(expansion: str) -> list[Faction]:
    return [f for f in FACTIONS if f.expansion == expansion]


def is_always_first(faction_id: str) -> bool:
    return faction_id in ALWAYS_FIRST_FACTIONS
